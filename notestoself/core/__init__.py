"""NotesToSelf core: the application facade and its export/import mixins."""

from notestoself.core.app import NotesToSelf
from notestoself.core.importing import ImportReport

__all__ = ["NotesToSelf", "ImportReport"]
