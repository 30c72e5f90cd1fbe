from __future__ import annotations

from typing import List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.agent import Agent
    from ..core.predator import Predator


def find_eaten(agents: Sequence[Agent], predators: Sequence[Predator]) -> List[Agent]:
    """Agents overlapping any predator, in population order.

    Read-only: the caller removes the returned agents in one batch so that
    several agents can be caught in the same tick.
    """
    eaten: List[Agent] = []
    if not predators:
        return eaten
    for agent in agents:
        for predator in predators:
            if agent.position.distance_to(predator.position) < max(agent.radius, predator.radius):
                eaten.append(agent)
                break
    return eaten


def remove_eaten(agents: List[Agent], eaten: Sequence[Agent]) -> List[Agent]:
    if not eaten:
        return agents
    eaten_ids = {agent.id for agent in eaten}
    return [agent for agent in agents if agent.id not in eaten_ids]
