"""fieldpatch: track document field edits and emit minimal partial updates."""

__version__ = "0.1.0"

from fieldpatch.config import FieldPatchConfig, find_config, load_config
from fieldpatch.differ import FieldDiff, compute_update, diff_fields
from fieldpatch.models import FieldOperation, OperationType, PatchRequest, UpdateDescription
from fieldpatch.store import (
    DocumentStore,
    InMemoryDocumentStore,
    StoreError,
    apply_changes,
)
from fieldpatch.tracker import (
    ChangeTracker,
    DuplicateFieldError,
    TrackerError,
    UnsupportedOperationError,
    is_placeholder_name,
    same_value,
)

__all__ = [
    "ChangeTracker",
    "compute_update",
    "diff_fields",
    "DocumentStore",
    "DuplicateFieldError",
    "FieldDiff",
    "FieldOperation",
    "FieldPatchConfig",
    "find_config",
    "InMemoryDocumentStore",
    "is_placeholder_name",
    "load_config",
    "OperationType",
    "PatchRequest",
    "same_value",
    "StoreError",
    "TrackerError",
    "UnsupportedOperationError",
    "UpdateDescription",
    "apply_changes",
    "__version__",
]
