"""Document store port (abstract interface).

Defines the contract the dispatcher core consumes from its persistence layer.
Adapters only have to provide strong per-document consistency: every single
operation (one insert, one update, one find-and-modify) is atomic, while a
bulk write is not required to be atomic across its operations.

Filters are plain dicts of ``field -> expected value``. A value of the form
``{"$in": [...]}`` matches when the document's field is one of the listed
values.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class InsertOne:
    """Insert one document as part of a bulk write."""

    document: dict


@dataclass(frozen=True)
class UpdateOne:
    """Update the first document matching ``filter``.

    ``set`` assigns scalar fields; ``push`` appends each listed item, in
    order, to the named list fields.
    """

    filter: dict
    set: dict = field(default_factory=dict)
    push: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteOne:
    """Delete the first document matching ``filter``."""

    filter: dict


@dataclass(frozen=True)
class BulkWriteResult:
    inserted_count: int = 0
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0


class DocumentStore(ABC):
    """Abstract asynchronous document store."""

    @abstractmethod
    async def insert_many(self, collection: str, documents: list[dict]) -> int:
        """Append documents. Writing zero documents is a successful no-op.

        Returns:
            Number of documents inserted.
        """
        ...

    @abstractmethod
    async def bulk_write(
        self,
        collection: str,
        operations: list[InsertOne | UpdateOne | DeleteOne],
    ) -> BulkWriteResult:
        """Execute a list of per-document write operations in order."""
        ...

    @abstractmethod
    async def find(self, collection: str, filter: dict, limit: int | None = None) -> list[dict]:
        """Return up to ``limit`` documents matching ``filter``."""
        ...

    @abstractmethod
    async def update_many(self, collection: str, filter: dict, values: dict) -> int:
        """Set ``values`` on every matching document.

        Returns:
            Number of documents modified.
        """
        ...

    @abstractmethod
    async def delete_many(self, collection: str, filter: dict) -> int:
        """Remove every matching document.

        Returns:
            Number of documents deleted.
        """
        ...

    @abstractmethod
    async def find_one_and_update(self, collection: str, filter: dict, values: dict) -> dict | None:
        """Atomically set ``values`` on the first matching document.

        Returns:
            The document after the update, or None when nothing matched.
        """
        ...


class DocumentStoreError(Exception):
    """Raised by adapters when the underlying store rejects or cannot serve a request."""
