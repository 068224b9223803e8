"""
Storage field model.
One resolved column (or association) of a generated storage type.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from ormgen.schemas.descriptor import FieldDescriptor
from ormgen.schemas.options import ColumnTag


class StorageKind(str, Enum):
    SCALAR = "scalar"
    NULLABLE = "nullable"
    BYTES = "bytes"
    OPAQUE = "opaque"
    ARRAY = "array"
    ASSOCIATION = "association"
    ASSOCIATION_LIST = "association_list"


class FieldSemantic(str, Enum):
    """How the wire field was classified; selects the conversion rule."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    ARRAY = "array"
    WRAPPER = "wrapper"
    TIMESTAMP = "timestamp"
    JSON = "json"
    UUID = "uuid"
    UUID_VALUE = "uuid_value"
    IDENTIFIER = "identifier"
    INET = "inet"
    TIME_ONLY = "time_only"
    MESSAGE = "message"
    MESSAGE_LIST = "message_list"
    TENANT = "tenant"
    INCLUDED = "included"


# Semantics synthesized by the resolver; they have no wire counterpart.
STORAGE_ONLY = frozenset({FieldSemantic.TENANT, FieldSemantic.INCLUDED})

ASSOCIATION_KINDS = frozenset({StorageKind.ASSOCIATION, StorageKind.ASSOCIATION_LIST})


class StorageField(BaseModel):
    name: str
    parent_type: str
    base_type: str
    kind: StorageKind
    semantic: FieldSemantic
    nullable: bool = False
    column: ColumnTag | None = None
    # Resource-kind marker: reference_of target, or the owner for a primary key.
    parent_origin_name: str | None = None
    position_field: str | None = None
    package: str | None = None
    descriptor: FieldDescriptor | None = None

    @property
    def column_type(self) -> str | None:
        return self.column.type if self.column else None

    @property
    def is_association(self) -> bool:
        return self.kind in ASSOCIATION_KINDS

    @property
    def is_primary_key(self) -> bool:
        return bool(self.column and self.column.primary_key)

    @property
    def wire_type_name(self) -> str | None:
        return self.descriptor.type_name if self.descriptor else None
