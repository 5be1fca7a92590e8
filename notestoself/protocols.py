"""Errors and shared protocols for notestoself."""

from typing import Callable, Optional, Protocol, runtime_checkable

# =============================================================================
# ERRORS
# =============================================================================


class NotesToSelfError(Exception):
    """Base for all notestoself errors."""

    pass


class RecordDecodeError(NotesToSelfError):
    """Raised when a serialized record is missing fields or has bad types."""

    pass


class ImportValidationError(NotesToSelfError):
    """Raised when an import snapshot cannot be decoded.

    The message is meant to be shown to the user as-is. Nothing from the
    snapshot has been applied when this is raised.
    """

    pass


class RemoteStoreError(NotesToSelfError):
    """Raised by remote adapters on transport or server failures."""

    pass


class RemoteUnavailableError(RemoteStoreError):
    """Raised when the remote store cannot be used (no account, no network)."""

    pass


# =============================================================================
# PROTOCOLS
# =============================================================================


@runtime_checkable
class KeyValueStore(Protocol):
    """Shared key-value blob storage visible to the app and the widget.

    ``write`` replaces unconditionally. ``read`` returns None for a missing
    key and never raises for it. There is no transaction across keys.
    """

    namespace: str

    def write(self, key: str, value: bytes) -> None: ...

    def read(self, key: str) -> Optional[bytes]: ...

    def remove(self, key: str) -> None: ...

    def read_int(self, key: str, default: int = 0) -> int: ...

    def write_int(self, key: str, value: int) -> None: ...

    def notify_reload(self) -> None: ...

    def reload_generation(self) -> int: ...

    def add_reload_listener(self, listener: Callable[[], None]) -> None: ...
