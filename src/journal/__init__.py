from .models import Distortion, EntryAnalysis, JournalEntry, Reframe
from .storage import EntryNotFound, EntryStore

__all__ = [
    "EntryStore",
    "EntryNotFound",
    "JournalEntry",
    "EntryAnalysis",
    "Distortion",
    "Reframe",
]
