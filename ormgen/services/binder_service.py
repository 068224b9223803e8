"""
Association binding.
Runs once, after every type is field-resolved: finds primary keys, stamps the
owner's origin name onto them, and records association edges, including the
ordered one-to-many associations that carry a position field.
"""
from __future__ import annotations

import logging

from ormgen.core.exceptions import PositionFieldError, PrimaryKeyConflictError
from ormgen.models.field import ASSOCIATION_KINDS, FieldSemantic, StorageField, StorageKind
from ormgen.models.schema_type import AssociationEdge, SchemaType
from ormgen.services.catalog_service import SchemaCatalog

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_KEY = "id"


class AssociationBinder:

    def __init__(self, catalog: SchemaCatalog) -> None:
        self.catalog = catalog

    def bind_all(self) -> None:
        schema_types = self.catalog.types()
        # Keys first: opaque identifiers are typed from the key they reference.
        for schema_type in schema_types:
            self.bind_primary_key(schema_type)
        for schema_type in schema_types:
            self.bind_associations(schema_type)
            self.type_opaque_identifiers(schema_type)

    # ── Primary keys ──────────────────────────────────────────────────────────

    @staticmethod
    def find_primary_key(schema_type: SchemaType) -> StorageField | None:
        """
        The field tagged ``primary_key``; failing that, a field named ``id``.
        More than one tagged key is a configuration error.
        """
        tagged = [field for field in schema_type.sorted_fields() if field.is_primary_key]
        if len(tagged) > 1:
            raise PrimaryKeyConflictError(schema_type.origin_name, [f.name for f in tagged])
        if tagged:
            return tagged[0]
        for field in schema_type.sorted_fields():
            if field.name.lower() == DEFAULT_PRIMARY_KEY and field.kind not in ASSOCIATION_KINDS:
                return field
        return None

    def bind_primary_key(self, schema_type: SchemaType) -> StorageField | None:
        field = self.find_primary_key(schema_type)
        if field is None:
            logger.debug("No primary key on %s; associations to it stay incomplete",
                         schema_type.origin_name)
            schema_type.primary_key = None
            return None
        schema_type.primary_key = field.name
        field.parent_origin_name = schema_type.origin_name
        return field

    # ── Associations ──────────────────────────────────────────────────────────

    def bind_associations(self, schema_type: SchemaType) -> list[AssociationEdge]:
        edges: list[AssociationEdge] = []
        for field in schema_type.sorted_fields():
            if field.position_field and field.kind is not StorageKind.ASSOCIATION_LIST:
                raise PositionFieldError(
                    schema_type.origin_name, field.name, "only repeated message fields can be ordered"
                )
            if not field.is_association:
                continue
            if field.position_field:
                self._check_position_field(schema_type, field)
            edges.append(
                AssociationEdge(
                    parent_type=schema_type.origin_name,
                    field_name=field.name,
                    child_type=field.base_type,
                    position_field=field.position_field,
                )
            )
        schema_type.associations = edges
        return edges

    def _check_position_field(self, schema_type: SchemaType, field: StorageField) -> None:
        child = self.catalog.lookup(field.base_type)
        if child is None:
            raise PositionFieldError(
                schema_type.origin_name, field.name, f"{field.base_type} is not registered"
            )
        if field.position_field not in child.fields:
            raise PositionFieldError(
                schema_type.origin_name,
                field.name,
                f"{child.origin_name} has no field {field.position_field!r}",
            )

    # ── Deferred identifier typing ────────────────────────────────────────────

    def type_opaque_identifiers(self, schema_type: SchemaType) -> None:
        """Give untyped Identifier fields the storage type of the key they reference."""
        for field in schema_type.sorted_fields():
            if field.semantic is not FieldSemantic.IDENTIFIER or field.kind is not StorageKind.OPAQUE:
                continue
            if field.parent_origin_name in (None, schema_type.origin_name):
                continue
            target = self.catalog.lookup(field.parent_origin_name)
            key = target.primary_key_field() if target else None
            if key is None or key.kind not in (StorageKind.SCALAR, StorageKind.NULLABLE, StorageKind.BYTES):
                continue
            if key.base_type not in ("string", "int64", "bytes"):
                continue
            field.base_type = key.base_type
            tag = field.column
            if key.base_type == "bytes":
                field.kind = StorageKind.BYTES
            elif tag and (tag.not_null or tag.primary_key):
                field.kind = StorageKind.SCALAR
                field.nullable = False
            else:
                field.kind = StorageKind.NULLABLE
            logger.debug("Typed %s.%s as %s from %s",
                         schema_type.origin_name, field.name, key.base_type, target.origin_name)
