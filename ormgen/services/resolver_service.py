"""
Field resolution.
Classifies every field of every registered type into a storage type and
column metadata. Needs the complete catalog, since message fields may point
at types declared in any input file.
"""
from __future__ import annotations

import logging

from ormgen.core.config import GeneratorSettings
from ormgen.core.exceptions import (
    DuplicateFieldError,
    TenantFieldConflictError,
    UnknownEnumError,
    UnknownIdentifierTagError,
    UnknownReferenceError,
)
from ormgen.models.field import FieldSemantic, StorageField, StorageKind
from ormgen.models.schema_type import SchemaType
from ormgen.schemas.descriptor import FieldDescriptor
from ormgen.schemas.options import ColumnTag, ExtraField, tag_with_type
from ormgen.services.catalog_service import SchemaCatalog

logger = logging.getLogger(__name__)

# ── Semantic extension types, matched on the last segment of the type name ────
TIMESTAMP = "Timestamp"
JSON_VALUE = "JSONValue"
UUID = "UUID"
UUID_VALUE = "UUIDValue"
IDENTIFIER = "Identifier"
INET_VALUE = "InetValue"
TIME_ONLY = "TimeOnly"

WRAPPER_TYPES: dict[str, str] = {
    "StringValue": "string",
    "DoubleValue": "float64",
    "FloatValue": "float32",
    "Int32Value": "int32",
    "Int64Value": "int64",
    "UInt32Value": "uint32",
    "UInt64Value": "uint64",
    "BoolValue": "bool",
}

# Repeated base type -> native array column hint (postgres only)
ARRAY_HINTS: dict[str, str] = {
    "bool": "bool[]",
    "float64": "float[]",
    "int64": "integer[]",
    "string": "text[]",
}

IDENTIFIER_STRING_TAGS = frozenset({"uuid", "text", "char", "array", "cidr", "inet", "macaddr"})
IDENTIFIER_INTEGER_TAGS = frozenset(
    {"smallint", "integer", "bigint", "numeric", "smallserial", "serial", "bigserial"}
)
IDENTIFIER_BYTES_TAGS = frozenset({"jsonb", "bytea"})

# Type names accepted for included fields without a package
BUILTIN_TYPES: dict[str, str] = {
    "bool": "bool",
    "int": "int64",
    "int8": "int32",
    "int16": "int32",
    "int32": "int32",
    "int64": "int64",
    "uint": "uint64",
    "uint8": "uint32",
    "uint16": "uint32",
    "uint32": "uint32",
    "uint64": "uint64",
    "uintptr": "uint64",
    "float32": "float32",
    "float64": "float64",
    "float": "float64",
    "string": "string",
    "str": "string",
    "[]byte": "bytes",
    "bytes": "bytes",
}

TENANT_FIELD = "account_id"


class FieldResolver:

    def __init__(self, catalog: SchemaCatalog, settings: GeneratorSettings) -> None:
        self.catalog = catalog
        self.settings = settings

    def resolve_all(self) -> None:
        for schema_type in self.catalog.types():
            self.resolve(schema_type)

    def resolve(self, schema_type: SchemaType) -> SchemaType:
        """
        (Re)build the storage field set of ``schema_type``.
        Fields are rebuilt from the message every time, so resolving twice
        gives the same result.
        """
        fields: dict[str, StorageField] = {}
        for descriptor in schema_type.message.fields:
            field = self._resolve_field(schema_type, descriptor)
            if field is None:
                continue
            target = descriptor.options.reference_of
            if target:
                if not self.catalog.is_registered(target):
                    raise UnknownReferenceError(schema_type.origin_name, descriptor.name, target)
                field.parent_origin_name = target
            fields[field.name] = field

        schema_type.fields = fields
        schema_type.primary_key = None
        schema_type.associations = []

        if schema_type.multi_account:
            self._add_tenant_field(schema_type)
        for extra in schema_type.message.options.include:
            self._add_included_field(schema_type, extra)

        return schema_type

    # ── Per-field classification ──────────────────────────────────────────────

    def _resolve_field(
        self, schema_type: SchemaType, descriptor: FieldDescriptor
    ) -> StorageField | None:
        if descriptor.options.drop:
            return None
        if descriptor.repeated:
            return self._resolve_repeated(schema_type, descriptor)
        if descriptor.kind == "enum":
            return self._resolve_enum(schema_type, descriptor)
        if descriptor.kind == "message":
            return self._resolve_message(schema_type, descriptor)

        base_type = descriptor.primitive_type or descriptor.kind
        is_bytes = base_type == "bytes"
        return self._field(
            schema_type,
            descriptor,
            base_type=base_type,
            kind=StorageKind.BYTES if is_bytes else StorageKind.SCALAR,
            semantic=FieldSemantic.PRIMITIVE,
            nullable=is_bytes,
        )

    def _resolve_repeated(
        self, schema_type: SchemaType, descriptor: FieldDescriptor
    ) -> StorageField | None:
        if descriptor.kind == "message":
            if self.catalog.is_registered(descriptor.type_name):
                return self._field(
                    schema_type,
                    descriptor,
                    base_type=descriptor.type_name or "",
                    kind=StorageKind.ASSOCIATION_LIST,
                    semantic=FieldSemantic.MESSAGE_LIST,
                    nullable=True,
                )
            self._skip(schema_type, descriptor, "repeated message type is not registered")
            return None

        base_type = descriptor.primitive_type
        if self.settings.is_postgres and base_type in ARRAY_HINTS:
            return self._field(
                schema_type,
                descriptor,
                base_type=base_type,
                kind=StorageKind.ARRAY,
                semantic=FieldSemantic.ARRAY,
                nullable=True,
                column=tag_with_type(descriptor.options.tag, ARRAY_HINTS[base_type]),
            )
        self._skip(schema_type, descriptor, "repeated type has no array mapping")
        return None

    def _resolve_enum(
        self, schema_type: SchemaType, descriptor: FieldDescriptor
    ) -> StorageField:
        if self.settings.string_enums:
            if self.catalog.lookup_enum(descriptor.type_name) is None:
                raise UnknownEnumError(
                    schema_type.origin_name, descriptor.name, descriptor.type_name or ""
                )
            base_type = "string"
        else:
            base_type = "int32"
        return self._field(
            schema_type,
            descriptor,
            base_type=base_type,
            kind=StorageKind.SCALAR,
            semantic=FieldSemantic.ENUM,
        )

    def _resolve_message(
        self, schema_type: SchemaType, descriptor: FieldDescriptor
    ) -> StorageField | None:
        short = descriptor.short_type_name
        tag = descriptor.options.tag
        postgres = self.settings.is_postgres

        if short in WRAPPER_TYPES:
            return self._field(
                schema_type,
                descriptor,
                base_type=WRAPPER_TYPES[short],
                kind=StorageKind.NULLABLE,
                semantic=FieldSemantic.WRAPPER,
                nullable=True,
            )
        if short == UUID:
            return self._field(
                schema_type,
                descriptor,
                base_type="uuid",
                kind=StorageKind.SCALAR,
                semantic=FieldSemantic.UUID,
                column=tag_with_type(tag, "uuid") if postgres else tag,
            )
        if short == UUID_VALUE:
            return self._field(
                schema_type,
                descriptor,
                base_type="uuid",
                kind=StorageKind.NULLABLE,
                semantic=FieldSemantic.UUID_VALUE,
                nullable=True,
                column=tag_with_type(tag, "uuid") if postgres else tag,
            )
        if short == TIMESTAMP:
            return self._field(
                schema_type,
                descriptor,
                base_type="datetime",
                kind=StorageKind.NULLABLE,
                semantic=FieldSemantic.TIMESTAMP,
                nullable=True,
            )
        if short == JSON_VALUE:
            if not postgres:
                self._skip(schema_type, descriptor, "JSON columns need the postgres engine")
                return None
            return self._field(
                schema_type,
                descriptor,
                base_type="jsonb",
                kind=StorageKind.NULLABLE,
                semantic=FieldSemantic.JSON,
                nullable=True,
                column=tag_with_type(tag, "jsonb"),
            )
        if short == IDENTIFIER:
            return self._resolve_identifier(schema_type, descriptor)
        if short == INET_VALUE:
            return self._field(
                schema_type,
                descriptor,
                base_type="inet",
                kind=StorageKind.NULLABLE,
                semantic=FieldSemantic.INET,
                nullable=True,
                column=tag_with_type(tag, "inet" if postgres else "varchar(48)"),
            )
        if short == TIME_ONLY:
            return self._field(
                schema_type,
                descriptor,
                base_type="string",
                kind=StorageKind.SCALAR,
                semantic=FieldSemantic.TIME_ONLY,
                column=tag_with_type(tag, "time"),
            )
        if self.catalog.is_registered(descriptor.type_name):
            return self._field(
                schema_type,
                descriptor,
                base_type=descriptor.type_name or "",
                kind=StorageKind.ASSOCIATION,
                semantic=FieldSemantic.MESSAGE,
                nullable=True,
            )
        self._skip(schema_type, descriptor, "message type is neither special nor registered")
        return None

    def _resolve_identifier(
        self, schema_type: SchemaType, descriptor: FieldDescriptor
    ) -> StorageField:
        tag = descriptor.options.tag
        declared = tag.type if tag and tag.type else ""
        tag_type = declared.lower()
        if "char" in tag_type:
            tag_type = "char"
        if "array" in tag_type or "[" in tag_type or "]" in tag_type:
            tag_type = "array"

        if tag_type in IDENTIFIER_STRING_TAGS:
            base_type, kind = "string", StorageKind.NULLABLE
        elif tag_type in IDENTIFIER_INTEGER_TAGS:
            base_type, kind = "int64", StorageKind.NULLABLE
        elif tag_type in IDENTIFIER_BYTES_TAGS:
            base_type, kind = "bytes", StorageKind.BYTES
        elif tag_type == "":
            # Left untyped; the binder may type it from the referenced key.
            base_type, kind = "any", StorageKind.OPAQUE
        else:
            raise UnknownIdentifierTagError(schema_type.origin_name, descriptor.name, declared)

        nullable = True
        if tag and (tag.not_null or tag.primary_key) and kind is StorageKind.NULLABLE:
            kind = StorageKind.SCALAR
            nullable = False
        return self._field(
            schema_type,
            descriptor,
            base_type=base_type,
            kind=kind,
            semantic=FieldSemantic.IDENTIFIER,
            nullable=nullable,
        )

    # ── Synthesized fields ────────────────────────────────────────────────────

    def _add_tenant_field(self, schema_type: SchemaType) -> None:
        existing = schema_type.fields.get(TENANT_FIELD)
        if existing is None:
            schema_type.fields[TENANT_FIELD] = StorageField(
                name=TENANT_FIELD,
                parent_type=schema_type.name,
                base_type="string",
                kind=StorageKind.SCALAR,
                semantic=FieldSemantic.TENANT,
            )
        elif existing.base_type != "string" or existing.kind is not StorageKind.SCALAR:
            raise TenantFieldConflictError(schema_type.name, TENANT_FIELD, existing.base_type)

    def _add_included_field(self, schema_type: SchemaType, extra: ExtraField) -> None:
        if extra.name in schema_type.fields:
            raise DuplicateFieldError(schema_type.name, extra.name)

        nullable = extra.type.startswith("*")
        raw_type = extra.type[1:] if nullable else extra.type
        # cut off any package subpaths
        raw_type = raw_type.rsplit(".", 1)[-1]

        package = None
        if extra.package:
            base_type = raw_type
            package = extra.package
        elif raw_type in BUILTIN_TYPES:
            base_type = BUILTIN_TYPES[raw_type]
        elif raw_type == "Time":
            base_type = "datetime"
        elif raw_type == "UUID":
            base_type = "uuid"
        elif extra.type == "Jsonb" and self.settings.is_postgres:
            base_type = "jsonb"
        elif raw_type == "Inet":
            base_type = "inet"
        else:
            if not self.settings.SUPPRESS_WARNINGS:
                logger.warning(
                    "included field %r of type %r is not a recognized special type, and no "
                    "package specified; it is assumed to be resolvable by the generated code",
                    extra.name,
                    extra.type,
                )
            base_type = raw_type

        if base_type == "bytes":
            kind = StorageKind.BYTES
        else:
            kind = StorageKind.NULLABLE if nullable else StorageKind.SCALAR
        schema_type.fields[extra.name] = StorageField(
            name=extra.name,
            parent_type=schema_type.name,
            base_type=base_type,
            kind=kind,
            semantic=FieldSemantic.INCLUDED,
            nullable=nullable or kind is StorageKind.BYTES,
            column=extra.tag,
            package=package,
        )

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _field(
        self,
        schema_type: SchemaType,
        descriptor: FieldDescriptor,
        *,
        base_type: str,
        kind: StorageKind,
        semantic: FieldSemantic,
        nullable: bool = False,
        column: ColumnTag | None = None,
    ) -> StorageField:
        return StorageField(
            name=descriptor.name,
            parent_type=schema_type.name,
            base_type=base_type,
            kind=kind,
            semantic=semantic,
            nullable=nullable,
            column=column if column is not None else descriptor.options.tag,
            position_field=descriptor.options.position_field,
            descriptor=descriptor,
        )

    @staticmethod
    def _skip(schema_type: SchemaType, descriptor: FieldDescriptor, reason: str) -> None:
        # Unsupported fields are left out quietly.
        logger.debug("Skipping %s.%s: %s", schema_type.origin_name, descriptor.name, reason)
