"""
Schema type model.
The storage-side counterpart of one registered message. Created at
registration, filled in by the resolver and binder, read-only afterwards.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ormgen.models.field import StorageField
from ormgen.models.hook import HookContract
from ormgen.schemas.descriptor import MessageDescriptor


class AssociationEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    parent_type: str
    field_name: str
    child_type: str
    position_field: str | None = None

    @property
    def ordered(self) -> bool:
        return self.position_field is not None


class SchemaType(BaseModel):
    name: str
    origin_name: str
    file: str
    message: MessageDescriptor
    fields: dict[str, StorageField] = Field(default_factory=dict)
    hooks: dict[str, HookContract] = Field(default_factory=dict)
    primary_key: str | None = None
    associations: list[AssociationEdge] = Field(default_factory=list)

    @property
    def table_override(self) -> str | None:
        return self.message.options.table

    @property
    def multi_account(self) -> bool:
        return self.message.options.multi_account

    def sorted_fields(self) -> list[StorageField]:
        return [self.fields[name] for name in sorted(self.fields)]

    def primary_key_field(self) -> StorageField | None:
        if self.primary_key is None:
            return None
        return self.fields.get(self.primary_key)

    def ordered_associations(self) -> list[AssociationEdge]:
        return [edge for edge in self.associations if edge.ordered]

    def __repr__(self) -> str:
        return f"<SchemaType name={self.name} fields={len(self.fields)}>"
