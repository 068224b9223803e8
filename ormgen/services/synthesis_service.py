"""
Conversion synthesis.
Turns the final catalog into per-type converters: two directional transform
plans plus the hook contracts. Reads the catalog only; converters for nested
types are looked up by name when a conversion runs, so self-references and
cycles need no special handling.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from ormgen.conversion.codec import ResourceCodec
from ormgen.conversion.converter import TypeConverter
from ormgen.conversion.hooks import HookTable
from ormgen.conversion.tenant import TenantResolver
from ormgen.conversion.transforms import (
    ArrayCopy,
    DirectCopy,
    EnumTransform,
    FieldTransform,
    IdentifierTransform,
    InetTransform,
    JSONTransform,
    MessageListTransform,
    MessageTransform,
    TimeOnlyTransform,
    TimestampTransform,
    UUIDTransform,
    UUIDValueTransform,
    WrapperTransform,
)
from ormgen.core.config import GeneratorSettings
from ormgen.core.exceptions import ConversionError
from ormgen.models.field import STORAGE_ONLY, FieldSemantic, StorageField, StorageKind
from ormgen.models.hook import Direction
from ormgen.models.schema_type import SchemaType
from ormgen.schemas.descriptor import FileDescriptor
from ormgen.services.catalog_service import SchemaCatalog
from ormgen.services.resolver_service import TENANT_FIELD

logger = logging.getLogger(__name__)

# Rules whose transform takes no extra arguments
SIMPLE_RULES: dict[FieldSemantic, type[FieldTransform]] = {
    FieldSemantic.PRIMITIVE: DirectCopy,
    FieldSemantic.ARRAY: ArrayCopy,
    FieldSemantic.WRAPPER: WrapperTransform,
    FieldSemantic.UUID: UUIDTransform,
    FieldSemantic.UUID_VALUE: UUIDValueTransform,
    FieldSemantic.TIMESTAMP: TimestampTransform,
    FieldSemantic.JSON: JSONTransform,
    FieldSemantic.INET: InetTransform,
    FieldSemantic.TIME_ONLY: TimeOnlyTransform,
}


class ConversionSynthesizer:

    def __init__(
        self,
        catalog: SchemaCatalog,
        settings: GeneratorSettings,
        *,
        codec: ResourceCodec | None = None,
        tenant_resolver: TenantResolver | None = None,
        hooks: Mapping[str, HookTable] | None = None,
    ) -> None:
        self.catalog = catalog
        self.settings = settings
        self.codec = codec
        self.tenant_resolver = tenant_resolver
        self.hooks = dict(hooks or {})
        self._converters: dict[str, TypeConverter] = {}

    # ── Public API ────────────────────────────────────────────────────────────

    def converter_for(self, type_name: str) -> TypeConverter:
        """The converter of a registered type, synthesized on first use."""
        converter = self._converters.get(type_name)
        if converter is None:
            schema_type = self.catalog.lookup(type_name)
            if schema_type is None:
                raise ConversionError(f"no converter for unregistered type {type_name!r}")
            converter = self.synthesize(schema_type)
        return converter

    def synthesize(self, schema_type: SchemaType) -> TypeConverter:
        converter = TypeConverter(
            schema_type,
            to_storage_plan=self.plan(schema_type, Direction.TO_STORAGE),
            to_wire_plan=self.plan(schema_type, Direction.TO_WIRE),
            hooks=self.hooks.get(schema_type.origin_name),
            tenant_field=TENANT_FIELD if schema_type.multi_account else None,
            tenant_resolver=self.tenant_resolver,
        )
        self._converters[schema_type.origin_name] = converter
        logger.debug(
            "Synthesized %s: %d to-storage and %d to-wire transforms",
            schema_type.origin_name,
            len(converter.to_storage_plan),
            len(converter.to_wire_plan),
        )
        return converter

    def synthesize_file(self, file: FileDescriptor) -> list[TypeConverter]:
        return [self.converter_for(t.origin_name) for t in self.catalog.types_in_file(file)]

    def plan(self, schema_type: SchemaType, direction: Direction) -> list[FieldTransform]:
        """Transforms for every wire-backed field, in field-name order."""
        plan = []
        for field in schema_type.sorted_fields():
            if field.semantic in STORAGE_ONLY:
                continue
            plan.append(self.transform_for(field, direction))
        return plan

    # ── Rule selection ────────────────────────────────────────────────────────

    def transform_for(self, field: StorageField, direction: Direction) -> FieldTransform:
        rule = SIMPLE_RULES.get(field.semantic)
        if rule is not None:
            return rule(field.name, direction)

        if field.semantic is FieldSemantic.ENUM:
            return EnumTransform(
                field.name,
                direction,
                enum=self.catalog.lookup_enum(field.wire_type_name),
                string_mode=field.base_type == "string",
            )
        if field.semantic is FieldSemantic.IDENTIFIER:
            return IdentifierTransform(
                field.name,
                direction,
                codec=self.codec,
                resource=field.parent_origin_name,
                base_type=field.base_type,
                nullable=field.kind is StorageKind.NULLABLE,
            )
        if field.semantic is FieldSemantic.MESSAGE:
            return MessageTransform(
                field.name, direction, type_name=field.base_type, lookup=self.converter_for
            )
        if field.semantic is FieldSemantic.MESSAGE_LIST:
            return MessageListTransform(
                field.name, direction, type_name=field.base_type, lookup=self.converter_for
            )
        raise ValueError(f"no conversion rule for {field.semantic.value} field {field.name!r}")
