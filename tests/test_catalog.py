"""
Schema catalog tests.
Covers: registration rules, idempotency, file-order independence, lookups,
hook contracts.
"""
from __future__ import annotations

import itertools

from factories import STATUS_ENUM, make_field, make_file, make_message
from ormgen.models.hook import Direction, HookPhase
from ormgen.services.catalog_service import SchemaCatalog


def _files():
    return [
        make_file("a.proto", [make_message("User", [make_field("id")])]),
        make_file(
            "b.proto",
            [
                make_message("Group", [make_field("id")]),
                make_message("Plain", [make_field("id")], ormable=False),
            ],
        ),
        make_file("c.proto", [make_message("Task", [make_field("id")])], enums=[STATUS_ENUM]),
    ]


class TestRegister:
    def test_ormable_message_registered(self) -> None:
        catalog = SchemaCatalog()
        schema_type = catalog.register(make_message("User", [make_field("id")]), "user.proto")
        assert schema_type is not None
        assert schema_type.name == "UserORM"
        assert schema_type.origin_name == "User"
        assert schema_type.file == "user.proto"
        assert "User" in catalog
        assert catalog.lookup("User") is schema_type

    def test_plain_message_known_but_not_registered(self) -> None:
        catalog = SchemaCatalog()
        assert catalog.register(make_message("Plain", [], ormable=False), "p.proto") is None
        assert not catalog.is_registered("Plain")
        assert catalog.is_known("Plain")
        assert catalog.lookup("Plain") is None

    def test_map_entry_never_registered(self) -> None:
        catalog = SchemaCatalog()
        entry = make_message("LabelsEntry", [make_field("key"), make_field("value")], map_entry=True)
        assert catalog.register(entry, "p.proto") is None
        assert not catalog.is_known("LabelsEntry")
        assert len(catalog) == 0

    def test_registration_is_idempotent(self) -> None:
        catalog = SchemaCatalog()
        message = make_message("User", [make_field("id")])
        first = catalog.register(message, "a.proto")
        second = catalog.register(message, "b.proto")
        assert first is second
        assert second.file == "a.proto"
        assert len(catalog) == 1

    def test_none_lookups(self) -> None:
        catalog = SchemaCatalog()
        assert catalog.lookup(None) is None
        assert not catalog.is_registered(None)
        assert catalog.lookup_enum(None) is None


class TestHookContracts:
    def test_four_contracts_created(self) -> None:
        catalog = SchemaCatalog()
        schema_type = catalog.register(make_message("User", [make_field("id")]), "a.proto")
        assert list(schema_type.hooks) == [
            "before_to_storage",
            "after_to_storage",
            "before_to_wire",
            "after_to_wire",
        ]

    def test_contract_signatures(self) -> None:
        catalog = SchemaCatalog()
        hooks = catalog.register(make_message("User", [make_field("id")]), "a.proto").hooks
        before = hooks["before_to_storage"]
        assert before.phase is HookPhase.BEFORE
        assert before.direction is Direction.TO_STORAGE
        assert (before.source_type, before.target_type) == ("User", "UserORM")
        after = hooks["after_to_wire"]
        assert (after.source_type, after.target_type) == ("UserORM", "User")


class TestFiles:
    def test_register_files_in_any_order(self) -> None:
        expected = None
        for order in itertools.permutations(_files()):
            catalog = SchemaCatalog()
            catalog.register_files(order)
            names = [schema_type.origin_name for schema_type in catalog.types()]
            assert catalog.lookup_enum("Status") is not None
            if expected is None:
                expected = names
            assert names == expected
        assert expected == ["Group", "Task", "User"]

    def test_types_in_file_keep_declaration_order(self) -> None:
        file = make_file(
            "x.proto",
            [make_message("Zeta", [make_field("id")]), make_message("Alpha", [make_field("id")])],
        )
        catalog = SchemaCatalog()
        catalog.register_file(file)
        assert [t.origin_name for t in catalog.types_in_file(file)] == ["Zeta", "Alpha"]
        assert [t.origin_name for t in catalog.types()] == ["Alpha", "Zeta"]

    def test_first_enum_declaration_wins(self) -> None:
        catalog = SchemaCatalog()
        catalog.register_enum(STATUS_ENUM)
        catalog.register_enum(STATUS_ENUM.model_copy(update={"values": {"OTHER": 0}}))
        assert catalog.lookup_enum("Status").values == STATUS_ENUM.values
