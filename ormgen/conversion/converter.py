"""
Per-type converter.
Composes the synthesized field transforms of one type with its hook table,
tenant stamping and ordered-association re-indexing.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ormgen.conversion.hooks import EMPTY_HOOKS, Hook, HookTable
from ormgen.conversion.tenant import TenantResolver, ambient_account_id
from ormgen.conversion.transforms import FieldTransform
from ormgen.core.exceptions import ConversionError
from ormgen.models.hook import HookContract
from ormgen.models.schema_type import AssociationEdge, SchemaType


class TypeConverter:
    """
    Converts one type between its wire and storage representations.

    Both directions start from a record holding ``None`` for every field of
    the target side, run the before-hook, the field transforms and the
    after-hook in that order. Any ``ConversionError`` stops the call and is
    re-raised with the record built so far attached as ``partial``.
    """

    def __init__(
        self,
        schema_type: SchemaType,
        *,
        to_storage_plan: Sequence[FieldTransform],
        to_wire_plan: Sequence[FieldTransform],
        hooks: HookTable | None = None,
        tenant_field: str | None = None,
        tenant_resolver: TenantResolver | None = None,
    ) -> None:
        self.name = schema_type.name
        self.origin_name = schema_type.origin_name
        self.to_storage_plan = tuple(to_storage_plan)
        self.to_wire_plan = tuple(to_wire_plan)
        self.hooks = hooks or EMPTY_HOOKS
        self.hook_contracts: tuple[HookContract, ...] = tuple(schema_type.hooks.values())
        self.ordered_associations: tuple[AssociationEdge, ...] = tuple(
            schema_type.ordered_associations()
        )
        self.tenant_field = tenant_field
        self.tenant_resolver = tenant_resolver or ambient_account_id
        self.storage_fields = tuple(sorted(schema_type.fields))
        self.wire_fields = tuple(
            field.name for field in schema_type.message.fields if not field.options.drop
        )

    # ── Wire -> storage ───────────────────────────────────────────────────────

    def to_storage(self, message: Any, ctx: Any = None) -> dict[str, Any]:
        target: dict[str, Any] = dict.fromkeys(self.storage_fields)
        try:
            self._run_hook(self.hooks.before_to_storage, ctx, message, target)
            for transform in self.to_storage_plan:
                transform.apply(message, target, ctx)
            if self.tenant_field is not None:
                target[self.tenant_field] = self.tenant_resolver(ctx)
            self._restamp_positions(target)
            self._run_hook(self.hooks.after_to_storage, ctx, message, target)
        except ConversionError as err:
            err.partial = target
            raise
        return target

    # ── Storage -> wire ───────────────────────────────────────────────────────

    def to_wire(self, record: Any, ctx: Any = None) -> dict[str, Any]:
        target: dict[str, Any] = dict.fromkeys(self.wire_fields)
        try:
            self._run_hook(self.hooks.before_to_wire, ctx, record, target)
            for transform in self.to_wire_plan:
                transform.apply(record, target, ctx)
            self._run_hook(self.hooks.after_to_wire, ctx, record, target)
        except ConversionError as err:
            err.partial = target
            raise
        return target

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    def _run_hook(hook: Hook | None, ctx: Any, source: Any, target: dict[str, Any]) -> None:
        if hook is not None:
            hook(ctx, source, target)

    def _restamp_positions(self, target: dict[str, Any]) -> None:
        """Overwrite each child's position field with its index in input order."""
        for edge in self.ordered_associations:
            for index, child in enumerate(target.get(edge.field_name) or []):
                if child is not None:
                    child[edge.position_field] = index

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "origin_name": self.origin_name,
            "to_storage": [transform.describe() for transform in self.to_storage_plan],
            "to_wire": [transform.describe() for transform in self.to_wire_plan],
            "hooks": [contract.name for contract in self.hook_contracts],
            "supplied_hooks": self.hooks.supplied(),
            "ordered_associations": [
                {"field": edge.field_name, "child": edge.child_type, "position": edge.position_field}
                for edge in self.ordered_associations
            ],
            "tenant_field": self.tenant_field,
        }

    def __repr__(self) -> str:
        return f"<TypeConverter {self.origin_name}>"
