"""
SQLAlchemy metadata shared by the generated storage tables.
"""
from __future__ import annotations

from sqlalchemy import MetaData

# Naming convention so generated constraint names are deterministic
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def create_metadata() -> MetaData:
    """Fresh metadata for one generation run."""
    return MetaData(naming_convention=NAMING_CONVENTION)
