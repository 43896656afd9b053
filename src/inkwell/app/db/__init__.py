from .store import EntryStore, InMemoryEntryStore

__all__ = ["EntryStore", "InMemoryEntryStore"]
