"""Field change tracker: collapses field edits into a partial update.

A :class:`ChangeTracker` wraps one document and keeps two pending
mappings, assignments (``$set``) and removals (``$unset``). They are
updated as each operation is applied, so redundant or cancelling edits
collapse immediately:

- adding a field and removing it again leaves nothing to do;
- updating a field to the value it already holds is a no-op;
- renaming is a removal of the old name plus an addition of the new one.

The empty-string field name is an editing placeholder for a field whose
name has not been chosen yet. It may live in the document but never
produces a change.

The tracker is synchronous and not thread-safe; callers sharing one
across threads must serialize access themselves.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable
from typing import Any

from fieldpatch.log import get_logger
from fieldpatch.models import FieldOperation, OperationType, PatchRequest, UpdateDescription

DEFAULT_ID_FIELD = "_id"
PLACEHOLDER_NAME = ""
REMOVAL_MARKER = ""


class TrackerError(Exception):
    """Base class for change tracker errors."""


class DuplicateFieldError(TrackerError):
    """Raised when an add or rename would overwrite an existing field."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f'A field with the name "{field}" already exists.')


class UnsupportedOperationError(TrackerError):
    """Raised when an operation is not available in the tracker's mode."""


Callback = Callable[[TrackerError | None], None]


def is_placeholder_name(field: str) -> bool:
    """Return True for the reserved name of a not-yet-named field."""
    return field == PLACEHOLDER_NAME


def same_value(a: Any, b: Any) -> bool:
    """Exact equality: equal values of the same type.

    Plain ``==`` treats ``1``, ``1.0`` and ``True`` as equal, but a stored
    document keeps the type, so a type-only change is still a change.
    Lists, tuples and dicts are compared element by element.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(same_value(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(same_value(x, y) for x, y in zip(a, b))
    return a == b


class ChangeTracker:
    """Aggregates modifications to a document into a partial update.

    Usage::

        tracker = ChangeTracker(doc)
        tracker.add("loc", "London")
        tracker.update("label", "Ninja Tune")
        store.update_one(tracker.lookup_key, tracker.update_description.to_update())

    By default the tracker edits *document* in place. With ``clone=True``
    it works on a deep copy instead, leaving *document* untouched as the
    original; only :meth:`add` and :meth:`update` are available then.

    Every operation takes an optional *callback*. When one is given, the
    outcome (``None`` or the error) is passed to it and nothing is raised;
    otherwise errors are raised to the caller. Either way a failed
    operation leaves the tracker unchanged.
    """

    def __init__(
        self,
        document: dict[str, Any],
        *,
        id_field: str = DEFAULT_ID_FIELD,
        clone: bool = False,
    ) -> None:
        self._id_field = id_field
        self._clone = clone
        self._persisted = frozenset(document)
        if clone:
            self._original = document
            self._doc = copy.deepcopy(document)
        else:
            self._original = copy.deepcopy(document)
            self._doc = document
        self._sets: dict[str, Any] = {}
        self._unsets: dict[str, str] = {}
        self._log = get_logger("tracker", document=self._doc.get(id_field))

    # --- Operations ---

    def add(self, field: str, value: Any, callback: Callback | None = None) -> None:
        """Add a new field. Fails if a field with that name already exists."""
        error = self._validate_field_name(field)
        if error is None:
            self._set_element(field, value)
            self._log.debug("field_added", field=field)
        self._complete(error, callback)

    def update(self, field: str, value: Any, callback: Callback | None = None) -> None:
        """Set a field, original or added, to *value*.

        Setting a field to the value it already holds records nothing.
        """
        if field not in self._doc or not same_value(self._doc[field], value):
            self._set_element(field, value)
            self._log.debug("field_updated", field=field)
        self._complete(None, callback)

    def remove(self, field: str, callback: Callback | None = None) -> None:
        """Remove a field from the document.

        Removing a field that only exists because of this session's edits
        cancels it out; removing a persisted field records an ``$unset``.
        """
        error = self._require_in_place("remove")
        if error is None:
            self._remove_element(field)
            self._log.debug("field_removed", field=field)
        self._complete(error, callback)

    def rename(self, old_name: str, new_name: str, callback: Callback | None = None) -> None:
        """Move the value at *old_name* to *new_name*.

        Fails if *new_name* already exists; the old field is then left as is.
        """
        error = self._require_in_place("rename") or self._validate_field_name(new_name)
        if error is None:
            self._set_element(new_name, self._remove_element(old_name))
            self._log.debug("field_renamed", old_name=old_name, new_name=new_name)
        self._complete(error, callback)

    def apply(self, operation: FieldOperation, callback: Callback | None = None) -> None:
        """Apply a recorded :class:`FieldOperation`."""
        if operation.op == OperationType.ADD:
            self.add(operation.field, operation.value, callback)
        elif operation.op == OperationType.UPDATE:
            self.update(operation.field, operation.value, callback)
        elif operation.op == OperationType.REMOVE:
            self.remove(operation.field, callback)
        else:
            if operation.new_name is None:
                raise ValueError("rename operations require 'new_name'")
            self.rename(operation.field, operation.new_name, callback)

    def apply_all(self, operations: Iterable[FieldOperation]) -> None:
        """Apply operations in order, stopping at the first error."""
        for operation in operations:
            self.apply(operation)

    # --- Accessors ---

    @property
    def id_field(self) -> str:
        return self._id_field

    @property
    def clone(self) -> bool:
        return self._clone

    @property
    def update_description(self) -> UpdateDescription:
        """The ``$set``/``$unset`` update equivalent to the edits so far."""
        return UpdateDescription(
            assignments=copy.deepcopy(self._sets),
            removals=dict(self._unsets),
        )

    @property
    def lookup_key(self) -> dict[str, Any]:
        """Filter addressing the stored copy of the document."""
        return {self._id_field: copy.deepcopy(self._doc.get(self._id_field))}

    @property
    def patch_request(self) -> PatchRequest:
        return PatchRequest(
            filter=self.lookup_key,
            update=self.update_description.to_update(),
        )

    @property
    def current(self) -> dict[str, Any]:
        return copy.deepcopy(self._doc)

    @property
    def original(self) -> dict[str, Any]:
        return copy.deepcopy(self._original)

    @property
    def assignments(self) -> dict[str, Any]:
        return copy.deepcopy(self._sets)

    @property
    def removals(self) -> dict[str, str]:
        return dict(self._unsets)

    @property
    def has_changes(self) -> bool:
        return bool(self._sets or self._unsets)

    # --- Internals ---

    def _set_element(self, field: str, value: Any) -> None:
        """Set the field in the document and record the assignment."""
        self._doc[field] = value
        if is_placeholder_name(field):
            return
        self._sets[field] = value
        self._unsets.pop(field, None)

    def _remove_element(self, field: str) -> Any:
        """Delete the field from the document and return its value."""
        value = self._doc.pop(field, None)
        self._sets.pop(field, None)
        # Only a field the stored copy actually has needs an $unset.
        if field in self._persisted and not is_placeholder_name(field):
            self._unsets[field] = REMOVAL_MARKER
        return value

    def _validate_field_name(self, field: str) -> DuplicateFieldError | None:
        if field in self._doc:
            self._log.debug("duplicate_field_rejected", field=field)
            return DuplicateFieldError(field)
        return None

    def _require_in_place(self, operation: str) -> UnsupportedOperationError | None:
        if self._clone:
            return UnsupportedOperationError(
                f"{operation!r} is not available on a cloning tracker"
            )
        return None

    @staticmethod
    def _complete(error: TrackerError | None, callback: Callback | None) -> None:
        if callback is not None:
            callback(error)
        elif error is not None:
            raise error

