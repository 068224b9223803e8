"""
Generator settings tests.
Covers: defaults, parameter strings, environment overrides, validation.
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from ormgen.core import config as config_module
from ormgen.core.config import DatabaseEngine, EnumRepresentation, GeneratorSettings


class TestDefaults:
    def test_defaults(self) -> None:
        settings = GeneratorSettings()
        assert settings.ENGINE is DatabaseEngine.POSTGRES
        assert settings.ENUM_REPRESENTATION is EnumRepresentation.STRING
        assert settings.SUPPRESS_WARNINGS is False
        assert settings.is_postgres
        assert settings.string_enums

    def test_settings_are_frozen(self) -> None:
        settings = GeneratorSettings()
        with pytest.raises(ValidationError):
            settings.ENGINE = DatabaseEngine.UNSET


class TestFromParameter:
    def test_full_parameter_string(self) -> None:
        settings = GeneratorSettings.from_parameter("engine=postgres,enums=integer,quiet,gateway")
        assert settings.is_postgres
        assert settings.ENUM_REPRESENTATION is EnumRepresentation.INTEGER
        assert settings.SUPPRESS_WARNINGS is True
        assert settings.GATEWAY is True

    def test_unknown_engine_is_unset(self) -> None:
        settings = GeneratorSettings.from_parameter("engine=mysql")
        assert settings.ENGINE is DatabaseEngine.UNSET
        assert not settings.is_postgres

    def test_engine_is_case_insensitive(self) -> None:
        assert GeneratorSettings.from_parameter("engine=Postgres").is_postgres

    def test_unknown_keys_and_blanks_ignored(self) -> None:
        settings = GeneratorSettings.from_parameter(" , plugins=grpc,,enums=STRING ")
        assert settings.string_enums

    def test_empty_parameter(self) -> None:
        assert GeneratorSettings.from_parameter(None).is_postgres

    def test_overrides_win(self) -> None:
        settings = GeneratorSettings.from_parameter("quiet", SUPPRESS_WARNINGS=False)
        assert settings.SUPPRESS_WARNINGS is False


class TestEnvironment:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ORMGEN_ENUM_REPRESENTATION", "INTEGER")
        assert GeneratorSettings().ENUM_REPRESENTATION is EnumRepresentation.INTEGER

    def test_invalid_enum_representation(self) -> None:
        with pytest.raises(ValidationError):
            GeneratorSettings(ENUM_REPRESENTATION="octal")

    def test_environment_read_only_when_built(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ORMGEN_ENUM_REPRESENTATION", "octal")
        assert not hasattr(config_module, "settings")
        with pytest.raises(ValidationError):
            GeneratorSettings()
