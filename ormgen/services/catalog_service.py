"""
Schema catalog.
Registry of every annotated message across the whole input set, keyed by
type name. Cross-type references are resolved by name through this registry,
so registration must be complete before any resolution starts.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from ormgen.core.naming import storage_type_name
from ormgen.models.hook import hook_contracts_for
from ormgen.models.schema_type import SchemaType
from ormgen.schemas.descriptor import EnumDescriptor, FileDescriptor, MessageDescriptor

logger = logging.getLogger(__name__)


class SchemaCatalog:

    def __init__(self) -> None:
        self._types: dict[str, SchemaType] = {}
        self._enums: dict[str, EnumDescriptor] = {}
        self._known: set[str] = set()

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, message: MessageDescriptor, file: str) -> SchemaType | None:
        """
        Register ``message`` if it is annotated for generation.
        Idempotent by name: a second registration returns the existing type.
        Map-entry messages are never registered.
        """
        if message.map_entry:
            return None
        self._known.add(message.name)
        if not message.options.ormable:
            return None
        existing = self._types.get(message.name)
        if existing is not None:
            return existing

        schema_type = SchemaType(
            name=storage_type_name(message.name),
            origin_name=message.name,
            file=file,
            message=message,
            hooks=hook_contracts_for(message.name, storage_type_name(message.name)),
        )
        self._types[message.name] = schema_type
        logger.debug("Registered %s from %s", message.name, file)
        return schema_type

    def register_enum(self, enum: EnumDescriptor) -> None:
        self._enums.setdefault(enum.name, enum)

    def register_file(self, file: FileDescriptor) -> list[SchemaType]:
        for enum in file.enums:
            self.register_enum(enum)
        registered = []
        for message in file.messages:
            schema_type = self.register(message, file.name)
            if schema_type is not None:
                registered.append(schema_type)
        return registered

    def register_files(self, files: Iterable[FileDescriptor]) -> None:
        for file in files:
            self.register_file(file)

    # ── Lookup ────────────────────────────────────────────────────────────────

    def lookup(self, name: str | None) -> SchemaType | None:
        if name is None:
            return None
        return self._types.get(name)

    def is_registered(self, name: str | None) -> bool:
        return name is not None and name in self._types

    def is_known(self, name: str | None) -> bool:
        """True for any declared message, annotated or not."""
        return name is not None and name in self._known

    def lookup_enum(self, name: str | None) -> EnumDescriptor | None:
        if name is None:
            return None
        return self._enums.get(name)

    def types(self) -> list[SchemaType]:
        """All registered types, sorted by origin name."""
        return [self._types[name] for name in sorted(self._types)]

    def types_in_file(self, file: FileDescriptor) -> list[SchemaType]:
        """Registered types of ``file`` in declaration order."""
        found = []
        for message in file.messages:
            schema_type = self._types.get(message.name)
            if schema_type is not None and schema_type.file == file.name:
                found.append(schema_type)
        return found

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)
