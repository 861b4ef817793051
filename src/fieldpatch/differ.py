"""Shallow document differ producing partial updates from two snapshots."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from fieldpatch.models import UpdateDescription
from fieldpatch.tracker import REMOVAL_MARKER, is_placeholder_name, same_value


class FieldDiff(BaseModel):
    """Top-level field differences between two documents."""

    added: dict[str, Any] = Field(default_factory=dict)
    removed: dict[str, Any] = Field(default_factory=dict)
    changed: dict[str, dict[str, Any]] = Field(default_factory=dict)
    unchanged: list[str] = Field(default_factory=list)


def diff_fields(
    before: dict[str, Any],
    after: dict[str, Any],
) -> FieldDiff:
    """Compute a shallow diff between *before* and *after*.

    - added: keys present in after but not before, with their values
    - removed: keys present in before but not after, with their values
    - changed: keys where values differ, with old/new pairs
    - unchanged: keys where values are identical (same type and value)

    Placeholder field names are ignored on both sides.
    """
    before_keys = {k for k in before if not is_placeholder_name(k)}
    after_keys = {k for k in after if not is_placeholder_name(k)}

    added = {k: after[k] for k in sorted(after_keys - before_keys)}
    removed = {k: before[k] for k in sorted(before_keys - after_keys)}
    changed: dict[str, dict[str, Any]] = {}
    unchanged: list[str] = []

    for k in sorted(before_keys & after_keys):
        if not same_value(before[k], after[k]):
            changed[k] = {"old": before[k], "new": after[k]}
        else:
            unchanged.append(k)

    return FieldDiff(added=added, removed=removed, changed=changed, unchanged=unchanged)


def compute_update(
    before: dict[str, Any],
    after: dict[str, Any],
) -> UpdateDescription:
    """Build the update that turns the stored *before* into *after*."""
    diff = diff_fields(before, after)
    assignments = dict(diff.added)
    assignments.update({k: pair["new"] for k, pair in diff.changed.items()})
    return UpdateDescription(
        assignments=assignments,
        removals={k: REMOVAL_MARKER for k in diff.removed},
    )
