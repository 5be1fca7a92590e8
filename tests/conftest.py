"""
Pytest fixtures and test configuration for notestoself tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from notestoself.core import NotesToSelf
from notestoself.storage.local import MemoryDefaults
from notestoself.storage.remote import InMemoryRemoteStore


class FakeClock:
    """Controllable time source; each call returns the current fake time."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture(autouse=True)
def isolated_data_home(tmp_path, monkeypatch):
    """Point every test at its own data directory and clear config env vars."""
    data_home = tmp_path / "data"
    monkeypatch.setenv("NOTESTOSELF_DATA_DIR", str(data_home))
    for var in (
        "NOTESTOSELF_NAMESPACE",
        "NOTESTOSELF_BACKEND_URL",
        "NOTESTOSELF_AUTH_TOKEN",
        "NOTESTOSELF_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    return data_home


@pytest.fixture
def t0():
    return datetime(2025, 11, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(t0):
    return FakeClock(t0 + timedelta(days=1))


@pytest.fixture
def kv():
    """Shared local store for the app and the widget."""
    return MemoryDefaults(namespace="test.group")


@pytest.fixture
def remote():
    """Remote store that is available and empty."""
    return InMemoryRemoteStore(available=True)


@pytest.fixture
def offline_remote():
    """Remote store reporting no account."""
    return InMemoryRemoteStore(available=False)


@pytest.fixture
def app(kv, remote, clock):
    """NotesToSelf wired to in-memory local and remote stores."""
    return NotesToSelf(kv=kv, remote=remote, clock=clock, app_version="1.2.3")
