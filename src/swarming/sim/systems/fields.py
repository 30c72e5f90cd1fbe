from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, TYPE_CHECKING

from pygame.math import Vector2

from ..utils.math2d import accumulate

if TYPE_CHECKING:
    from ..core.agent import Agent
    from ..core.field import ForceField


class FieldForces:
    """Per-tick field contributions keyed by agent id.

    Owned by the tick orchestrator: fields push into it, agents read their
    sum and contribution count when steering, and it is cleared once the
    agent population has consumed it.
    """

    def __init__(self) -> None:
        self._contributions: Dict[int, List[Vector2]] = {}

    def push(self, agent_id: int, force: Vector2) -> None:
        bucket = self._contributions.get(agent_id)
        if bucket is None:
            bucket = []
            self._contributions[agent_id] = bucket
        bucket.append(Vector2(force))

    def count(self, agent_id: int) -> int:
        return len(self._contributions.get(agent_id, ()))

    def total(self, agent_id: int) -> Vector2:
        total = Vector2()
        for force in self._contributions.get(agent_id, ()):
            accumulate(total, force)
        return total

    def clear(self) -> None:
        self._contributions.clear()

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._contributions.values())


def apply_fields(fields: Iterable["ForceField"], agents: Sequence["Agent"], forces: FieldForces) -> int:
    applied = 0
    for emitter in fields:
        applied += emitter.apply(agents, forces)
    return applied
