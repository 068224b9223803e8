"""
Generation pipeline.
Registers every file, resolves every type and binds associations across the
whole input set before anything is synthesized, so references between files
resolve regardless of file order. A configuration error anywhere aborts the
run before any output exists.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy import MetaData, Table

from ormgen.conversion.codec import ResourceCodec
from ormgen.conversion.converter import TypeConverter
from ormgen.conversion.hooks import HookTable
from ormgen.conversion.tenant import TenantResolver
from ormgen.core.config import GeneratorSettings
from ormgen.core.naming import table_name
from ormgen.db.base import create_metadata
from ormgen.db.tables import build_table
from ormgen.models.field import StorageField
from ormgen.models.hook import HookContract
from ormgen.models.schema_type import SchemaType
from ormgen.schemas.descriptor import GenerationRequest
from ormgen.services.binder_service import AssociationBinder
from ormgen.services.catalog_service import SchemaCatalog
from ormgen.services.resolver_service import FieldResolver
from ormgen.services.synthesis_service import ConversionSynthesizer

logger = logging.getLogger(__name__)


class GeneratedModel:
    """Everything emitted for one registered type."""

    def __init__(
        self,
        schema_type: SchemaType,
        *,
        converter: TypeConverter,
        table: Table,
    ) -> None:
        self.schema_type = schema_type
        self.converter = converter
        self.table = table

    @property
    def name(self) -> str:
        return self.schema_type.name

    @property
    def origin_name(self) -> str:
        return self.schema_type.origin_name

    @property
    def table_name(self) -> str:
        return table_name(self.schema_type.origin_name, self.schema_type.table_override)

    @property
    def fields(self) -> list[StorageField]:
        return self.schema_type.sorted_fields()

    @property
    def hook_contracts(self) -> list[HookContract]:
        return list(self.schema_type.hooks.values())

    def __repr__(self) -> str:
        return f"<GeneratedModel {self.name} table={self.table_name!r}>"


class GeneratedFile:

    def __init__(self, name: str, package: str, models: list[GeneratedModel]) -> None:
        self.name = name
        self.package = package
        self.models = models

    def model(self, origin_name: str) -> GeneratedModel | None:
        for model in self.models:
            if model.origin_name == origin_name:
                return model
        return None

    def __repr__(self) -> str:
        return f"<GeneratedFile {self.name} models={len(self.models)}>"


class Generator:

    def __init__(
        self,
        settings: GeneratorSettings | None = None,
        *,
        codec: ResourceCodec | None = None,
        tenant_resolver: TenantResolver | None = None,
        hooks: Mapping[str, HookTable] | None = None,
    ) -> None:
        self.settings = settings
        self.codec = codec
        self.tenant_resolver = tenant_resolver
        self.hooks = hooks
        self.catalog: SchemaCatalog | None = None
        self.synthesizer: ConversionSynthesizer | None = None
        self.metadata: MetaData | None = None

    def build_catalog(self, request: GenerationRequest, settings: GeneratorSettings) -> SchemaCatalog:
        """Register, resolve and bind the whole input set."""
        catalog = SchemaCatalog()
        catalog.register_files(request.files)
        FieldResolver(catalog, settings).resolve_all()
        AssociationBinder(catalog).bind_all()
        return catalog

    def run(self, request: GenerationRequest) -> list[GeneratedFile]:
        settings = self.settings or GeneratorSettings.from_parameter(request.parameter)
        catalog = self.build_catalog(request, settings)

        synthesizer = ConversionSynthesizer(
            catalog,
            settings,
            codec=self.codec,
            tenant_resolver=self.tenant_resolver,
            hooks=self.hooks,
        )
        metadata = create_metadata()
        output: list[GeneratedFile] = []
        for file in request.files:
            if not file.generate:
                logger.debug("Skipping output for %s", file.name)
                continue
            models = [
                GeneratedModel(
                    schema_type,
                    converter=converter,
                    table=build_table(schema_type, metadata),
                )
                for schema_type, converter in zip(
                    catalog.types_in_file(file), synthesizer.synthesize_file(file)
                )
            ]
            output.append(GeneratedFile(file.name, file.package, models))
            logger.info("Generated %d storage models for %s", len(models), file.name)

        self.catalog = catalog
        self.synthesizer = synthesizer
        self.metadata = metadata
        return output
