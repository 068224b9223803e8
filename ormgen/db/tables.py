"""
Storage table builder.
Materialises resolved schema types as SQLAlchemy ``Table`` objects. Column
types come from the column hint when there is one, otherwise from the
field's base type.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Double,
    Float,
    Integer,
    LargeBinary,
    MetaData,
    Numeric,
    SmallInteger,
    String,
    Table,
    Text,
    Time,
    Uuid,
)
from sqlalchemy.dialects.postgresql import ARRAY, CIDR, INET, JSONB, MACADDR, UUID
from sqlalchemy.types import TypeEngine

from ormgen.core.exceptions import ColumnNameConflictError
from ormgen.core.naming import table_name
from ormgen.models.field import StorageField, StorageKind
from ormgen.models.schema_type import SchemaType
from ormgen.schemas.options import ColumnTag

logger = logging.getLogger(__name__)

TypeFactory = Callable[[], TypeEngine]

# ── Column hint -> SQL type ───────────────────────────────────────────────────
HINT_TYPES: dict[str, TypeFactory] = {
    "bool[]": lambda: ARRAY(Boolean),
    "float[]": lambda: ARRAY(Double),
    "integer[]": lambda: ARRAY(BigInteger),
    "text[]": lambda: ARRAY(Text),
    "uuid": lambda: UUID(as_uuid=True),
    "jsonb": JSONB,
    "json": JSON,
    "inet": INET,
    "cidr": CIDR,
    "macaddr": MACADDR,
    "time": Time,
    "date": Date,
    "timestamp": lambda: DateTime(timezone=False),
    "timestamptz": lambda: DateTime(timezone=True),
    "text": Text,
    "bool": Boolean,
    "boolean": Boolean,
    "smallint": SmallInteger,
    "smallserial": SmallInteger,
    "int": Integer,
    "integer": Integer,
    "serial": Integer,
    "bigint": BigInteger,
    "bigserial": BigInteger,
    "real": Float,
    "double precision": Double,
    "bytea": LargeBinary,
}

SIZED_STRING = re.compile(r"^(?:varchar|character varying|char|character)\s*\(\s*(\d+)\s*\)$")
NUMERIC = re.compile(r"^(?:numeric|decimal)(?:\s*\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\))?$")

# ── Base type -> SQL type ─────────────────────────────────────────────────────
BASE_TYPES: dict[str, TypeFactory] = {
    "bool": Boolean,
    "int32": Integer,
    "uint32": BigInteger,
    "int64": BigInteger,
    "uint64": lambda: Numeric(20, 0),
    "float32": Float,
    "float64": Double,
    "string": Text,
    "bytes": LargeBinary,
    "datetime": lambda: DateTime(timezone=True),
    "uuid": Uuid,
    "jsonb": JSON,
    "inet": lambda: String(48),
}


def column_type(field: StorageField) -> TypeEngine | None:
    """SQL type for ``field``, or None when it cannot be mapped to a column."""
    hint = (field.column_type or "").strip().lower()
    if hint:
        factory = HINT_TYPES.get(hint)
        if factory is not None:
            return factory()
        match = SIZED_STRING.match(hint)
        if match:
            return String(int(match.group(1)))
        match = NUMERIC.match(hint)
        if match:
            precision, scale = match.groups()
            return Numeric(
                int(precision) if precision else None,
                int(scale) if scale else None,
            )
        logger.debug("Unrecognized column type %r on %s.%s; using its base type",
                     hint, field.parent_type, field.name)

    if field.kind is StorageKind.OPAQUE:
        return None
    if field.base_type == "string" and field.column and field.column.size:
        return String(field.column.size)
    factory = BASE_TYPES.get(field.base_type)
    return factory() if factory is not None else None


def build_column(schema_type: SchemaType, field: StorageField) -> Column | None:
    if field.is_association:
        return None
    tag = field.column or ColumnTag()
    if tag.ignore:
        return None
    sql_type = column_type(field)
    if sql_type is None:
        logger.debug("No column for %s.%s (%s)", schema_type.origin_name, field.name, field.base_type)
        return None

    primary = field.name == schema_type.primary_key
    return Column(
        tag.column or field.name,
        sql_type,
        key=field.name,
        primary_key=primary,
        nullable=field.nullable and not tag.not_null and not primary,
        unique=tag.unique or bool(tag.unique_index),
        index=bool(tag.index or tag.unique_index) or None,
        server_default=tag.default,
        autoincrement=tag.auto_increment if tag.auto_increment is not None else "auto",
    )


def build_table(schema_type: SchemaType, metadata: MetaData) -> Table:
    """
    Table for ``schema_type``. Types that share a table name (for instance
    several views over one table) extend the same ``Table``; a later type's
    column replaces an earlier one with the same key.
    """
    name = table_name(schema_type.origin_name, schema_type.table_override)
    columns: list[Column] = []
    owners: dict[str, str] = {}
    for field in schema_type.sorted_fields():
        column = build_column(schema_type, field)
        if column is None:
            continue
        owner = owners.get(column.name)
        if owner is not None:
            raise ColumnNameConflictError(schema_type.origin_name, column.name, [owner, field.name])
        owners[column.name] = field.name
        columns.append(column)
    if name in metadata.tables:
        logger.debug("%s shares table %r with another type", schema_type.origin_name, name)
    return Table(name, metadata, *columns, extend_existing=True)


def build_tables(schema_types: Iterable[SchemaType], metadata: MetaData) -> dict[str, Table]:
    """Tables keyed by origin name."""
    return {schema_type.origin_name: build_table(schema_type, metadata) for schema_type in schema_types}
