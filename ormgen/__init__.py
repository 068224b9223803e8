"""
ormgen: derives storage-layer types and wire/storage converters from
annotated message schemas.
"""
from ormgen.conversion.hooks import HookTable  # noqa: F401
from ormgen.core.config import DatabaseEngine, EnumRepresentation, GeneratorSettings  # noqa: F401
from ormgen.core.exceptions import ConfigurationError, ConversionError  # noqa: F401
from ormgen.schemas.descriptor import GenerationRequest  # noqa: F401
from ormgen.services.generator_service import Generator  # noqa: F401

__version__ = "1.0.0"
