"""Filesystem and environment helpers."""

import os
from pathlib import Path

DEFAULT_NAMESPACE = "group.co.uk.cursive.NotesToSelf"


def get_data_home() -> Path:
    """Return the notestoself data directory.

    ``NOTESTOSELF_DATA_DIR`` overrides the default ``~/.notestoself``.
    """
    override = os.environ.get("NOTESTOSELF_DATA_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".notestoself"


def resolve_namespace(namespace: str | None = None) -> str:
    """Resolve the shared storage namespace (app group).

    Priority: explicit argument, ``NOTESTOSELF_NAMESPACE``, built-in default.
    """
    return namespace or os.environ.get("NOTESTOSELF_NAMESPACE") or DEFAULT_NAMESPACE
