"""
Test configuration and shared fixtures.
Schemas are built in memory; nothing touches a database.
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from factories import RecordingCodec, make_file
from ormgen.core.config import DatabaseEngine, EnumRepresentation, GeneratorSettings
from ormgen.schemas.descriptor import EnumDescriptor, MessageDescriptor
from ormgen.services.binder_service import AssociationBinder
from ormgen.services.catalog_service import SchemaCatalog
from ormgen.services.resolver_service import FieldResolver
from ormgen.services.synthesis_service import ConversionSynthesizer


# ── Settings ──────────────────────────────────────────────────────────────────

@pytest.fixture
def postgres_settings() -> GeneratorSettings:
    return GeneratorSettings(
        ENGINE=DatabaseEngine.POSTGRES,
        ENUM_REPRESENTATION=EnumRepresentation.STRING,
    )


@pytest.fixture
def unset_settings() -> GeneratorSettings:
    return GeneratorSettings(
        ENGINE=DatabaseEngine.UNSET,
        ENUM_REPRESENTATION=EnumRepresentation.STRING,
    )


@pytest.fixture
def integer_enum_settings() -> GeneratorSettings:
    return GeneratorSettings(
        ENGINE=DatabaseEngine.POSTGRES,
        ENUM_REPRESENTATION=EnumRepresentation.INTEGER,
    )


# ── Pipeline helpers ──────────────────────────────────────────────────────────

@pytest.fixture
def build_catalog(postgres_settings: GeneratorSettings) -> Callable[..., SchemaCatalog]:
    """Register, resolve and bind the given messages as one file."""

    def _build(
        *messages: MessageDescriptor,
        settings: GeneratorSettings | None = None,
        enums: list[EnumDescriptor] | None = None,
    ) -> SchemaCatalog:
        catalog = SchemaCatalog()
        catalog.register_file(make_file("example.proto", list(messages), enums=enums))
        FieldResolver(catalog, settings or postgres_settings).resolve_all()
        AssociationBinder(catalog).bind_all()
        return catalog

    return _build


@pytest.fixture
def build_synthesizer(
    build_catalog: Callable[..., SchemaCatalog], postgres_settings: GeneratorSettings
) -> Callable[..., ConversionSynthesizer]:
    """Catalog plus synthesizer; extra keyword arguments go to the synthesizer."""

    def _build(
        *messages: MessageDescriptor,
        settings: GeneratorSettings | None = None,
        enums: list[EnumDescriptor] | None = None,
        **kwargs: Any,
    ) -> ConversionSynthesizer:
        settings = settings or postgres_settings
        catalog = build_catalog(*messages, settings=settings, enums=enums)
        return ConversionSynthesizer(catalog, settings, **kwargs)

    return _build


@pytest.fixture
def codec() -> RecordingCodec:
    return RecordingCodec()
