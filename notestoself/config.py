"""Remote backend configuration.

Settings are resolved in priority order:

1. ``<data_home>/credentials.json``
2. Environment variables (``NOTESTOSELF_BACKEND_URL``, ``NOTESTOSELF_AUTH_TOKEN``)
3. ``<data_home>/config.json`` (legacy)
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from notestoself.storage.cloud import HttpRemoteStore
from notestoself.storage.remote import InMemoryRemoteStore, RemoteStore
from notestoself.utils import get_data_home

logger = logging.getLogger(__name__)


@dataclass
class RemoteSettings:
    backend_url: Optional[str] = None
    auth_token: Optional[str] = None
    timeout: float = 30.0

    @property
    def configured(self) -> bool:
        return bool(self.backend_url and self.auth_token)


def validate_backend_url(url: str) -> "str | None":
    """Validate a backend URL for safe token transmission.

    Only http/https with a host are accepted, and plaintext http only for
    localhost/127.0.0.1.

    Returns:
        The URL unchanged if valid, or ``None`` if rejected (with a warning
        logged for the rejection reason).
    """
    if not url:
        return None

    parsed = urlparse(url)
    if parsed.scheme not in {"https", "http"}:
        logger.warning("Invalid backend_url scheme; only http/https allowed.")
        return None
    if not parsed.netloc:
        logger.warning("Invalid backend_url; missing host.")
        return None
    if parsed.scheme == "http":
        host = parsed.hostname or ""
        if host not in {"localhost", "127.0.0.1"}:
            logger.warning("Refusing non-local http backend_url for security.")
            return None
    return url


def _read_json(path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.debug(f"Could not read {path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def load_remote_settings() -> RemoteSettings:
    """Resolve backend settings from files and environment."""
    home = get_data_home()

    creds = _read_json(home / "credentials.json")
    backend_url = creds.get("backend_url")
    # "token" is accepted for older credential files
    auth_token = creds.get("auth_token") or creds.get("token")

    backend_url = backend_url or os.environ.get("NOTESTOSELF_BACKEND_URL")
    auth_token = auth_token or os.environ.get("NOTESTOSELF_AUTH_TOKEN")

    if not backend_url or not auth_token:
        config = _read_json(home / "config.json")
        backend_url = backend_url or config.get("backend_url")
        auth_token = auth_token or config.get("auth_token")

    if backend_url:
        backend_url = validate_backend_url(backend_url)

    timeout = 30.0
    raw_timeout = os.environ.get("NOTESTOSELF_TIMEOUT")
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            logger.warning(f"Ignoring invalid NOTESTOSELF_TIMEOUT={raw_timeout!r}")

    return RemoteSettings(
        backend_url=backend_url.rstrip("/") if backend_url else None,
        auth_token=auth_token,
        timeout=timeout,
    )


def build_remote_store(settings: Optional[RemoteSettings] = None, offline: bool = False) -> RemoteStore:
    """Create the remote adapter for the current configuration.

    With nothing configured (or ``offline``), an unavailable in-memory store
    is returned so every data store takes the local fallback path.
    """
    settings = settings if settings is not None else load_remote_settings()
    if offline or not settings.configured:
        if not offline:
            logger.info("No remote backend configured, working from local storage only")
        return InMemoryRemoteStore(available=False)
    return HttpRemoteStore(settings.backend_url, settings.auth_token, timeout=settings.timeout)
