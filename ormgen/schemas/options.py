"""
Annotation schemas.
Per-field and per-message options that drive storage generation.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


# ── Column tag ────────────────────────────────────────────────────────────────

class ColumnTag(BaseModel):
    """Column metadata; ``type`` carries the engine-specific type hint."""

    column: str | None = None
    type: str | None = None
    size: int | None = None
    precision: int | None = None
    primary_key: bool = False
    unique: bool = False
    default: str | None = None
    not_null: bool = False
    auto_increment: bool | None = None
    index: str | None = None
    unique_index: str | None = None
    ignore: bool = False

    def with_type(self, type_hint: str) -> "ColumnTag":
        return self.model_copy(update={"type": type_hint})


def tag_with_type(tag: ColumnTag | None, type_hint: str) -> ColumnTag:
    """Return a copy of ``tag`` (or a fresh tag) carrying ``type_hint``."""
    return (tag or ColumnTag()).with_type(type_hint)


# ── Field options ─────────────────────────────────────────────────────────────

class HasManyOptions(BaseModel):
    position_field: str | None = None


class FieldOptions(BaseModel):
    drop: bool = False
    tag: ColumnTag | None = None
    reference_of: str | None = None
    has_many: HasManyOptions | None = None

    @property
    def position_field(self) -> str | None:
        return self.has_many.position_field if self.has_many else None


# ── Message options ───────────────────────────────────────────────────────────

class ExtraField(BaseModel):
    """A storage-only field merged into the generated type."""

    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    package: str | None = None
    tag: ColumnTag | None = None


class MessageOptions(BaseModel):
    ormable: bool = False
    table: str | None = None
    multi_account: bool = False
    include: list[ExtraField] = Field(default_factory=list)
