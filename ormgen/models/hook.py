"""
Hook contract model.
Describes the optional callbacks a concrete type may supply around each
conversion direction.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Direction(str, Enum):
    TO_STORAGE = "to_storage"
    TO_WIRE = "to_wire"


class HookPhase(str, Enum):
    BEFORE = "before"
    AFTER = "after"


class HookContract(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    direction: Direction
    phase: HookPhase
    source_type: str
    target_type: str
    description: str


HOOK_ORDER: tuple[tuple[HookPhase, Direction], ...] = (
    (HookPhase.BEFORE, Direction.TO_STORAGE),
    (HookPhase.AFTER, Direction.TO_STORAGE),
    (HookPhase.BEFORE, Direction.TO_WIRE),
    (HookPhase.AFTER, Direction.TO_WIRE),
)


def hook_name(phase: HookPhase, direction: Direction) -> str:
    return f"{phase.value}_{direction.value}"


def hook_contracts_for(origin_name: str, storage_name: str) -> dict[str, HookContract]:
    """The four hook contracts of a registered type, keyed by hook name."""
    contracts: dict[str, HookContract] = {}
    for phase, direction in HOOK_ORDER:
        if direction is Direction.TO_STORAGE:
            source, target = origin_name, storage_name
        else:
            source, target = storage_name, origin_name
        name = hook_name(phase, direction)
        contracts[name] = HookContract(
            name=name,
            direction=direction,
            phase=phase,
            source_type=source,
            target_type=target,
            description=f"called {phase.value} the default {direction.value} code of {origin_name}",
        )
    return contracts
