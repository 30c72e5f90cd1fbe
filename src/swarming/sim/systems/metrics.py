from __future__ import annotations

from typing import Iterable, TYPE_CHECKING

from ..core.agent import InfluenceKind
from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.agent import Agent


def count_influences(agents: Iterable[Agent]) -> tuple[int, int, int]:
    crowding = 0
    cohesion = 0
    field = 0
    for agent in agents:
        if agent.influence is InfluenceKind.CROWDING:
            crowding += 1
        elif agent.influence is InfluenceKind.COHESION:
            cohesion += 1
        elif agent.influence is InfluenceKind.FIELD:
            field += 1
    return crowding, cohesion, field


def create_metrics(
    tick: int,
    agents: Iterable[Agent],
    predators: int,
    fields: int,
    eaten: int,
    neighbor_checks: int,
    duration_ms: float,
) -> TickMetrics:
    agent_list = list(agents)
    population = len(agent_list)
    crowding, cohesion, field = count_influences(agent_list)
    return TickMetrics(
        tick=tick,
        population=population,
        predators=predators,
        fields=fields,
        eaten=eaten,
        neighbor_checks=neighbor_checks,
        crowding=crowding,
        cohesion=cohesion,
        field=field,
        tick_duration_ms=duration_ms,
    )
