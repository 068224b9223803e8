"""
Schema descriptor models.
The already-parsed message/field model handed over by the host transport.
Can be validated straight from JSON with ``GenerationRequest.model_validate_json``.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from ormgen.schemas.options import FieldOptions, MessageOptions

FieldKind = Literal[
    "bool",
    "int32",
    "int64",
    "sint32",
    "sint64",
    "uint32",
    "uint64",
    "fixed32",
    "fixed64",
    "sfixed32",
    "sfixed64",
    "float",
    "double",
    "string",
    "bytes",
    "enum",
    "message",
]

# Wire primitive kind -> storage base type
PRIMITIVE_KINDS: dict[str, str] = {
    "bool": "bool",
    "int32": "int32",
    "int64": "int64",
    "sint32": "int32",
    "sint64": "int64",
    "uint32": "uint32",
    "uint64": "uint64",
    "fixed32": "uint32",
    "fixed64": "uint64",
    "float": "float32",
    "sfixed32": "int32",
    "sfixed64": "int64",
    "double": "float64",
    "string": "string",
    "bytes": "bytes",
}


# ── Fields ────────────────────────────────────────────────────────────────────

class FieldDescriptor(BaseModel):
    name: str = Field(min_length=1)
    kind: FieldKind
    type_name: str | None = None
    repeated: bool = False
    options: FieldOptions = Field(default_factory=FieldOptions)

    @model_validator(mode="after")
    def check_type_name(self) -> "FieldDescriptor":
        if self.kind in ("enum", "message") and not self.type_name:
            raise ValueError(f"field {self.name!r} of kind {self.kind!r} needs a type_name")
        return self

    @property
    def short_type_name(self) -> str:
        """Last dotted segment of ``type_name``, e.g. ``Timestamp``."""
        return (self.type_name or "").rsplit(".", 1)[-1]

    @property
    def primitive_type(self) -> str | None:
        return PRIMITIVE_KINDS.get(self.kind)


# ── Enums and messages ────────────────────────────────────────────────────────

class EnumDescriptor(BaseModel):
    name: str = Field(min_length=1)
    values: dict[str, int] = Field(default_factory=dict)

    @property
    def names(self) -> dict[int, str]:
        """Number -> name; the first name declared for a number wins."""
        table: dict[int, str] = {}
        for name, number in self.values.items():
            table.setdefault(number, name)
        return table


class MessageDescriptor(BaseModel):
    name: str = Field(min_length=1)
    fields: list[FieldDescriptor] = Field(default_factory=list)
    options: MessageOptions = Field(default_factory=MessageOptions)
    map_entry: bool = False

    @model_validator(mode="after")
    def check_unique_fields(self) -> "MessageDescriptor":
        seen: set[str] = set()
        for field in self.fields:
            if field.name in seen:
                raise ValueError(f"duplicate field {field.name!r} in message {self.name!r}")
            seen.add(field.name)
        return self

    def field(self, name: str) -> FieldDescriptor | None:
        for field in self.fields:
            if field.name == name:
                return field
        return None


# ── Files and requests ────────────────────────────────────────────────────────

class FileDescriptor(BaseModel):
    name: str = Field(min_length=1)
    package: str = ""
    messages: list[MessageDescriptor] = Field(default_factory=list)
    enums: list[EnumDescriptor] = Field(default_factory=list)
    generate: bool = True


class GenerationRequest(BaseModel):
    files: list[FileDescriptor] = Field(default_factory=list)
    parameter: str | None = None
