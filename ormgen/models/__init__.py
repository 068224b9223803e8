"""
Storage model package. Import all models here so callers can pull the whole
resolved type graph from one place.
"""
from ormgen.models.field import FieldSemantic, StorageField, StorageKind  # noqa: F401
from ormgen.models.hook import Direction, HookContract, HookPhase  # noqa: F401
from ormgen.models.schema_type import AssociationEdge, SchemaType  # noqa: F401
