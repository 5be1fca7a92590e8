"""Local logging setup for notestoself.

Two outputs, both under ``<data_home>/logs``:

- ``local-YYYY-MM-DD.log``: the ``notestoself`` logger tree
- ``store-events-YYYY-MM-DD.log``: one line per load/save/sync event,
  ``event | namespace=... | details``
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from notestoself.utils import get_data_home

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _log_dir() -> Path:
    path = get_data_home() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def setup_notestoself_logging(namespace: str = "default", level: str = "INFO") -> logging.Logger:
    """Configure the ``notestoself`` logger with a dated file handler.

    Safe to call repeatedly: handlers are only attached once. Unknown level
    names fall back to INFO. At DEBUG a console handler is added too.
    """
    level_name = (level or "INFO").upper()
    if level_name not in _VALID_LEVELS:
        level_name = "INFO"

    logger = logging.getLogger("notestoself")
    logger.setLevel(getattr(logging, level_name))

    formatter = logging.Formatter(LOG_FORMAT)

    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        log_file = _log_dir() / f"local-{_today()}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if level_name == "DEBUG":
        has_console = any(
            isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
            for h in logger.handlers
        )
        if not has_console:
            console = logging.StreamHandler()
            console.setFormatter(formatter)
            logger.addHandler(console)

    logger.debug(f"Logging configured for namespace {namespace} at {level_name}")
    return logger


def log_store_event(event: str, details: str, namespace: str = "default") -> None:
    """Append one line to today's store-events log."""
    timestamp = datetime.now(timezone.utc).isoformat()
    path = _log_dir() / f"store-events-{_today()}.log"
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{timestamp} | {event} | namespace={namespace} | {details}\n")


def log_load(namespace: str, source: str, **counts: int) -> None:
    """Record a load with per-collection counts."""
    parts = [f"source={source}"] + [f"{k}={v}" for k, v in counts.items()]
    log_store_event("load", ", ".join(parts), namespace=namespace)


def log_save(namespace: str, record_type: str, record_id: str, summary: str = "") -> None:
    """Record a local save; ids are truncated to keep lines short."""
    details = f"type={record_type}, id={record_id[:8]}..."
    if summary:
        details += f", summary={summary[:50]}"
    log_store_event("save", details, namespace=namespace)


def log_sync(namespace: str, direction: str, count: int, errors: int = 0) -> None:
    """Record a remote push or pull."""
    log_store_event(
        "sync", f"direction={direction}, count={count}, errors={errors}", namespace=namespace
    )
