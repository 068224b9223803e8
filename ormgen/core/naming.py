"""
Table and storage-type naming.
"""
from __future__ import annotations

import inflection

STORAGE_SUFFIX = "ORM"


def storage_type_name(origin_name: str) -> str:
    return f"{origin_name}{STORAGE_SUFFIX}"


def default_table_name(origin_name: str) -> str:
    """``UserProfile`` -> ``user_profiles``; dotted names use the last segment."""
    short = origin_name.rsplit(".", 1)[-1]
    return inflection.pluralize(inflection.underscore(short))


def table_name(origin_name: str, override: str | None = None) -> str:
    if override:
        return override
    return default_table_name(origin_name)
