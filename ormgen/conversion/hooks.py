"""
Hook tables.
The optional before/after callbacks of one type, resolved once when the
converter is built. A missing hook is simply skipped.

Every hook is called as ``hook(ctx, source, target)`` and reports failure by
raising ``ConversionError``.
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ormgen.models.hook import HOOK_ORDER, hook_name

Hook = Callable[[Any, Any, dict[str, Any]], None]

HOOK_NAMES: tuple[str, ...] = tuple(hook_name(phase, direction) for phase, direction in HOOK_ORDER)


class HookTable:

    __slots__ = ("before_to_storage", "after_to_storage", "before_to_wire", "after_to_wire")

    def __init__(
        self,
        *,
        before_to_storage: Hook | None = None,
        after_to_storage: Hook | None = None,
        before_to_wire: Hook | None = None,
        after_to_wire: Hook | None = None,
    ) -> None:
        self.before_to_storage = before_to_storage
        self.after_to_storage = after_to_storage
        self.before_to_wire = before_to_wire
        self.after_to_wire = after_to_wire

    @classmethod
    def from_object(cls, obj: Any) -> "HookTable":
        """Collect whichever of the four hook methods ``obj`` defines."""
        found = {}
        for name in HOOK_NAMES:
            hook = getattr(obj, name, None)
            if callable(hook):
                found[name] = hook
        return cls(**found)

    def supplied(self) -> list[str]:
        return [name for name in HOOK_NAMES if getattr(self, name) is not None]

    def __repr__(self) -> str:
        return f"<HookTable supplied={self.supplied()}>"


EMPTY_HOOKS = HookTable()
