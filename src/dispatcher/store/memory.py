"""In-memory document store adapter — for development and testing.

Keeps collections as ordered lists of dict documents. Every coroutine runs
to completion without yielding, so each call is atomic with respect to other
tasks on the same event loop. Documents are deep-copied on the way in and on
the way out, the same isolation a real store gives its callers.

The adapter records every call in ``calls`` and can be configured to fail,
which is how tests simulate store outages.
"""

import copy

from dispatcher.store.port import (
    BulkWriteResult,
    DeleteOne,
    DocumentStore,
    DocumentStoreError,
    InsertOne,
    UpdateOne,
)


def matches(document: dict, filter: dict) -> bool:
    """Return True when ``document`` satisfies every condition in ``filter``."""
    for key, expected in filter.items():
        value = document.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


class InMemoryDocumentStore(DocumentStore):
    """Document store that keeps everything in process memory."""

    def __init__(self) -> None:
        self.collections: dict[str, list[dict]] = {}
        self.calls: list[dict] = []
        self.should_succeed: bool = True
        self.failure_reason: str = "Document store unavailable"
        self.failing_methods: set[str] | None = None
        self.failures_remaining: int | None = None

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Document store unavailable",
        methods: set[str] | None = None,
        times: int | None = None,
    ) -> None:
        """Configure failure behavior.

        Args:
            should_succeed: False makes matching calls raise DocumentStoreError.
            failure_reason: Message carried by the raised error.
            methods: Restrict failures to these method names (all methods when None).
            times: Fail only this many matching calls, then succeed again.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failing_methods = set(methods) if methods is not None else None
        self.failures_remaining = times

    def reset(self) -> None:
        """Drop all data and recorded calls, and restore default behavior."""
        self.collections.clear()
        self.calls.clear()
        self.configure()

    def documents(self, collection: str) -> list[dict]:
        """Return a copy of every document in ``collection`` (test helper)."""
        return copy.deepcopy(self.collections.get(collection, []))

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def _record(self, method: str, collection: str, **details) -> None:
        self.calls.append({"method": method, "collection": collection, **details})

        if self.should_succeed:
            return
        if self.failing_methods is not None and method not in self.failing_methods:
            return
        if self.failures_remaining is not None:
            if self.failures_remaining <= 0:
                return
            self.failures_remaining -= 1
        raise DocumentStoreError(self.failure_reason)

    def _collection(self, name: str) -> list[dict]:
        return self.collections.setdefault(name, [])

    @staticmethod
    def _apply_update(document: dict, set_values: dict, push_values: dict | None = None) -> None:
        document.update(copy.deepcopy(set_values))
        for key, items in (push_values or {}).items():
            existing = document.get(key)
            if existing is None:
                existing = []
                document[key] = existing
            elif not isinstance(existing, list):
                raise DocumentStoreError(f"Cannot push onto non-list field '{key}'")
            existing.extend(copy.deepcopy(items))

    async def insert_many(self, collection: str, documents: list[dict]) -> int:
        documents = list(documents)
        self._record("insert_many", collection, count=len(documents))
        self._collection(collection).extend(copy.deepcopy(doc) for doc in documents)
        return len(documents)

    async def bulk_write(self, collection, operations) -> BulkWriteResult:
        operations = list(operations)
        self._record("bulk_write", collection, count=len(operations))
        docs = self._collection(collection)

        inserted = matched = modified = deleted = 0
        for operation in operations:
            if isinstance(operation, InsertOne):
                docs.append(copy.deepcopy(operation.document))
                inserted += 1
            elif isinstance(operation, UpdateOne):
                target = next((doc for doc in docs if matches(doc, operation.filter)), None)
                if target is None:
                    continue
                matched += 1
                self._apply_update(target, operation.set, operation.push)
                modified += 1
            elif isinstance(operation, DeleteOne):
                for index, doc in enumerate(docs):
                    if matches(doc, operation.filter):
                        del docs[index]
                        deleted += 1
                        break
            else:
                raise DocumentStoreError(f"Unsupported write operation: {operation!r}")

        return BulkWriteResult(
            inserted_count=inserted,
            matched_count=matched,
            modified_count=modified,
            deleted_count=deleted,
        )

    async def find(self, collection: str, filter: dict, limit: int | None = None) -> list[dict]:
        self._record("find", collection, filter=copy.deepcopy(filter), limit=limit)
        found = [doc for doc in self._collection(collection) if matches(doc, filter)]
        if limit is not None:
            found = found[:limit]
        return copy.deepcopy(found)

    async def update_many(self, collection: str, filter: dict, values: dict) -> int:
        self._record("update_many", collection, filter=copy.deepcopy(filter), values=copy.deepcopy(values))
        modified = 0
        for doc in self._collection(collection):
            if matches(doc, filter):
                self._apply_update(doc, values)
                modified += 1
        return modified

    async def delete_many(self, collection: str, filter: dict) -> int:
        self._record("delete_many", collection, filter=copy.deepcopy(filter))
        docs = self._collection(collection)
        kept = [doc for doc in docs if not matches(doc, filter)]
        deleted = len(docs) - len(kept)
        docs[:] = kept
        return deleted

    async def find_one_and_update(self, collection: str, filter: dict, values: dict) -> dict | None:
        self._record("find_one_and_update", collection, filter=copy.deepcopy(filter))
        for doc in self._collection(collection):
            if matches(doc, filter):
                self._apply_update(doc, values)
                return copy.deepcopy(doc)
        return None
