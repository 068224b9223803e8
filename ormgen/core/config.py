"""
Core configuration module for ormgen.
Uses pydantic-settings for environment variable management with full validation.
A settings object is fixed for a whole generation run and passed explicitly
to the resolver and synthesizer.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseEngine(str, Enum):
    UNSET = "unset"
    POSTGRES = "postgres"


class EnumRepresentation(str, Enum):
    INTEGER = "integer"
    STRING = "string"


# protoc-style parameter keys mapped onto settings fields
_PARAMETER_KEYS: dict[str, str] = {
    "engine": "ENGINE",
    "enums": "ENUM_REPRESENTATION",
    "quiet": "SUPPRESS_WARNINGS",
    "gateway": "GATEWAY",
}


class GeneratorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ORMGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # ── Storage backend ───────────────────────────────────────────────────────
    ENGINE: DatabaseEngine = DatabaseEngine.POSTGRES

    # ── Enum columns ──────────────────────────────────────────────────────────
    ENUM_REPRESENTATION: EnumRepresentation = EnumRepresentation.STRING

    # ── Diagnostics ───────────────────────────────────────────────────────────
    SUPPRESS_WARNINGS: bool = False

    # ── Forwarded to the emitter, unused by the core ──────────────────────────
    GATEWAY: bool = False

    @field_validator("ENGINE", mode="before")
    @classmethod
    def parse_engine(cls, v: Any) -> DatabaseEngine:
        """Only postgres is a supported engine; anything else leaves it unset."""
        if isinstance(v, DatabaseEngine):
            return v
        if isinstance(v, str) and v.strip().lower() == DatabaseEngine.POSTGRES.value:
            return DatabaseEngine.POSTGRES
        return DatabaseEngine.UNSET

    @field_validator("ENUM_REPRESENTATION", mode="before")
    @classmethod
    def parse_enum_representation(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def is_postgres(self) -> bool:
        return self.ENGINE is DatabaseEngine.POSTGRES

    @property
    def string_enums(self) -> bool:
        return self.ENUM_REPRESENTATION is EnumRepresentation.STRING

    @classmethod
    def from_parameter(cls, parameter: str | None, **overrides: Any) -> "GeneratorSettings":
        """
        Build settings from a protoc-style parameter string such as
        ``engine=postgres,enums=integer,quiet``. Bare flags mean True.
        Unknown keys are ignored.
        """
        values: dict[str, Any] = {}
        for item in (parameter or "").split(","):
            item = item.strip()
            if not item:
                continue
            key, sep, value = item.partition("=")
            field = _PARAMETER_KEYS.get(key.strip().lower())
            if field is None:
                continue
            values[field] = value.strip() if sep else True
        values.update(overrides)
        return cls(**values)
