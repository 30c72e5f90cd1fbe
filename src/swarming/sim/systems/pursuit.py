from __future__ import annotations

import math
from typing import Sequence, TYPE_CHECKING

from pygame.math import Vector2

from ..utils.math2d import direction_to
from .steering import is_in_front, move

if TYPE_CHECKING:
    from ..core.agent import Agent
    from ..core.predator import Predator
    from .fields import FieldForces


def select_target(predator: Predator, agents: Sequence[Agent]) -> Agent | None:
    target = None
    target_distance = math.inf
    for agent in agents:
        distance = agent.position.distance_to(predator.position)
        if distance > predator.sight_radius:
            continue
        if distance >= target_distance:
            continue
        if not is_in_front(predator.position, predator.heading, agent.position):
            continue
        target = agent
        target_distance = distance
    return target


def compute_pursuit_heading(predator: Predator, agents: Sequence[Agent]) -> Vector2:
    target = select_target(predator, agents)
    if target is None:
        return Vector2(predator.heading)
    heading = direction_to(predator.position, target.position)
    if heading.length_squared() == 0.0:
        return Vector2(predator.heading)
    return heading


def move_predator(predator: Predator, desired_heading: Vector2, agents: Sequence[Agent], forces: FieldForces) -> int:
    """Move, then drag the predator's repulsive field to its new spot and apply it."""
    move(predator, desired_heading)
    return predator.sync_emitter().apply(agents, forces)
