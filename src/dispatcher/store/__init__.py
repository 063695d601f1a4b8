"""Document store factory.

Provides get_store() / set_store() to swap implementations:
- InMemoryDocumentStore for development and testing
- a driver-backed adapter for production, installed with set_store()
"""

from dispatcher.store.memory import InMemoryDocumentStore
from dispatcher.store.port import DocumentStore

_current_store: DocumentStore | None = None


def get_store() -> DocumentStore:
    """Return the active document store. Defaults to InMemoryDocumentStore."""
    global _current_store
    if _current_store is None:
        _current_store = InMemoryDocumentStore()
    return _current_store


def set_store(store: DocumentStore) -> None:
    """Override the active document store."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    """Reset to the default store (useful for testing)."""
    global _current_store
    _current_store = None
