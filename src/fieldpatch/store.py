"""Document store protocol and an in-memory reference backend.

The change tracker only describes an update; applying it is the job of a
store. Any object with an ``update_one(filter, update)`` method satisfies
:class:`DocumentStore` (a MongoDB collection does). The in-memory store
implements just enough of ``$set``/``$unset`` semantics for tests and
examples.
"""

from __future__ import annotations

import copy
import threading
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from fieldpatch.log import get_logger
from fieldpatch.tracker import DEFAULT_ID_FIELD

if TYPE_CHECKING:
    from fieldpatch.tracker import ChangeTracker

SUPPORTED_OPERATORS = frozenset({"$set", "$unset"})


class StoreError(Exception):
    """Raised when a store cannot insert or patch a document."""


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for stores that accept partial updates."""

    def update_one(self, filter: dict[str, Any], update: dict[str, Any]) -> Any: ...


class InMemoryDocumentStore:
    """Dict-backed store keyed by the identifier field.

    Thread-safe via a lock on all operations.
    """

    def __init__(self, id_field: str = DEFAULT_ID_FIELD) -> None:
        self._id_field = id_field
        self._docs: dict[Any, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._log = get_logger("store", id_field=id_field)

    def insert(self, document: dict[str, Any]) -> None:
        if self._id_field not in document:
            raise StoreError(f"Document has no {self._id_field!r} field")
        key = document[self._id_field]
        with self._lock:
            if key in self._docs:
                raise StoreError(f"Document {key!r} already exists")
            self._docs[key] = copy.deepcopy(document)

    def get(self, key: Any) -> dict[str, Any] | None:
        with self._lock:
            doc = self._docs.get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def update_one(self, filter: dict[str, Any], update: dict[str, Any]) -> bool:
        """Apply ``$set``/``$unset`` to the document matching *filter*.

        Returns True if a document matched.
        """
        unknown = set(update) - SUPPORTED_OPERATORS
        if unknown:
            raise StoreError(f"Unsupported update operators: {sorted(unknown)}")
        if set(filter) != {self._id_field}:
            raise StoreError(f"Filter must contain only {self._id_field!r}")

        with self._lock:
            doc = self._docs.get(filter[self._id_field])
            if doc is None:
                return False
            for field, value in update.get("$set", {}).items():
                doc[field] = copy.deepcopy(value)
            for field in update.get("$unset", {}):
                doc.pop(field, None)
        self._log.debug("document_patched", key=filter[self._id_field])
        return True

    def __len__(self) -> int:
        return len(self._docs)


def apply_changes(tracker: ChangeTracker, store: DocumentStore) -> bool:
    """Send the tracker's pending update to *store*.

    Returns False without calling the store when there is nothing to change,
    otherwise whether the store reports a matching document.
    """
    request = tracker.patch_request
    if not request.update:
        return False
    return bool(store.update_one(request.filter, request.update))
