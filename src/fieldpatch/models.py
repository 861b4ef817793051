"""Core data models for fieldpatch.

Defines the schemas for:
- Update descriptions (``$set`` / ``$unset`` clauses)
- Recorded field operations (edit scripts)
- Patch requests (lookup key + update, as handed to a store)
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Enums ---


class OperationType(enum.StrEnum):
    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
    RENAME = "rename"


# --- Update Description ---


class UpdateDescription(BaseModel):
    """The partial update that brings a stored document in line with edits.

    Empty clauses are ``None`` and are left out of :meth:`to_update`, since
    partial-update requests must omit them rather than send them empty.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    assignments: dict[str, Any] | None = Field(default=None, alias="$set")
    removals: dict[str, str] | None = Field(default=None, alias="$unset")

    @field_validator("assignments", "removals")
    @classmethod
    def _drop_empty_clause(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        return value or None

    @property
    def is_empty(self) -> bool:
        return self.assignments is None and self.removals is None

    def to_update(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Edit Scripts ---


class FieldOperation(BaseModel):
    """A single edit applied to a document field."""

    model_config = ConfigDict(frozen=True)

    op: OperationType
    field: str
    value: Any = None
    new_name: str | None = None

    @model_validator(mode="after")
    def _check_rename_target(self) -> FieldOperation:
        if self.op == OperationType.RENAME and self.new_name is None:
            raise ValueError("rename operations require 'new_name'")
        return self


# --- Patch Request ---


class PatchRequest(BaseModel):
    """Lookup key and update, the two arguments of a partial-update call."""

    model_config = ConfigDict(frozen=True)

    filter: dict[str, Any]
    update: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
