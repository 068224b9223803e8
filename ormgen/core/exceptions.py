"""
Exceptions raised by ormgen.
Configuration errors are fatal and abort a whole generation run; conversion
errors are raised by synthesized converters and are local to one call.
"""
from __future__ import annotations

from typing import Any


class OrmGenException(Exception):
    """Base exception for all ormgen errors."""

    def __init__(self, detail: str, error_code: str | None = None) -> None:
        self.detail = detail
        self.error_code = error_code or "ORMGEN_ERROR"
        super().__init__(detail)


# ── Generation time ───────────────────────────────────────────────────────────

class ConfigurationError(OrmGenException):
    """Fatal schema or annotation problem found while building the catalog."""

    def __init__(
        self,
        detail: str,
        *,
        type_name: str | None = None,
        field_name: str | None = None,
        error_code: str | None = None,
    ) -> None:
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(detail, error_code=error_code or "CONFIGURATION_ERROR")


class UnknownReferenceError(ConfigurationError):
    def __init__(self, type_name: str, field_name: str, target: str) -> None:
        self.target = target
        super().__init__(
            f"unknown message type in reference_of: {target!r} in field: "
            f"{field_name!r} of type: {type_name!r}",
            type_name=type_name,
            field_name=field_name,
            error_code="UNKNOWN_REFERENCE",
        )


class TenantFieldConflictError(ConfigurationError):
    def __init__(self, type_name: str, field_name: str, existing_type: str) -> None:
        super().__init__(
            f"cannot include {field_name!r} into {type_name!r}: it already exists "
            f"there with type {existing_type!r}",
            type_name=type_name,
            field_name=field_name,
            error_code="TENANT_FIELD_CONFLICT",
        )


class DuplicateFieldError(ConfigurationError):
    def __init__(self, type_name: str, field_name: str) -> None:
        super().__init__(
            f"cannot include {field_name!r} into {type_name!r}: it already exists there",
            type_name=type_name,
            field_name=field_name,
            error_code="DUPLICATE_FIELD",
        )


class UnknownIdentifierTagError(ConfigurationError):
    def __init__(self, type_name: str, field_name: str, tag_type: str) -> None:
        self.tag_type = tag_type
        super().__init__(
            f"unknown tag type {tag_type!r} for Identifier field {field_name!r} "
            f"of type {type_name!r}",
            type_name=type_name,
            field_name=field_name,
            error_code="UNKNOWN_IDENTIFIER_TAG",
        )


class UnknownEnumError(ConfigurationError):
    def __init__(self, type_name: str, field_name: str, enum_name: str) -> None:
        super().__init__(
            f"enum {enum_name!r} used by field {field_name!r} of type {type_name!r} "
            "is not declared in the input set; string enum columns need the enum's "
            "value table, so the request must carry its EnumDescriptor",
            type_name=type_name,
            field_name=field_name,
            error_code="UNKNOWN_ENUM",
        )


class PrimaryKeyConflictError(ConfigurationError):
    def __init__(self, type_name: str, field_names: list[str]) -> None:
        super().__init__(
            f"type {type_name!r} declares more than one primary key: "
            + ", ".join(field_names),
            type_name=type_name,
            error_code="PRIMARY_KEY_CONFLICT",
        )


class PositionFieldError(ConfigurationError):
    def __init__(self, type_name: str, field_name: str, detail: str) -> None:
        super().__init__(
            f"invalid has_many position field on {type_name}.{field_name}: {detail}",
            type_name=type_name,
            field_name=field_name,
            error_code="POSITION_FIELD",
        )


class ColumnNameConflictError(ConfigurationError):
    def __init__(self, type_name: str, column_name: str, field_names: list[str]) -> None:
        self.column_name = column_name
        self.field_names = field_names
        super().__init__(
            f"fields {', '.join(field_names)} of type {type_name!r} all map to column "
            f"{column_name!r}",
            type_name=type_name,
            field_name=field_names[-1],
            error_code="COLUMN_NAME_CONFLICT",
        )


# ── Conversion time ───────────────────────────────────────────────────────────

class ConversionError(OrmGenException):
    """
    Raised inside a synthesized converter. ``partial`` holds the target
    record as built up to the point of failure.
    """

    def __init__(
        self,
        detail: str,
        *,
        field_name: str | None = None,
        partial: Any = None,
    ) -> None:
        self.field_name = field_name
        self.partial = partial
        super().__init__(detail, error_code="CONVERSION_ERROR")
