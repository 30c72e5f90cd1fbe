from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, TYPE_CHECKING

from pygame.math import Vector2

from ..core.agent import InfluenceKind, wrap_position
from ..utils.math2d import (
    accumulate,
    angle_degrees,
    direction_to,
    from_angle_degrees,
    safe_normalize,
    safe_normalize_xy,
)

if TYPE_CHECKING:
    from ..core.agent import Agent
    from ..core.predator import Predator
    from .fields import FieldForces

# Neighbours closer than this multiple of the body radius get the overlap penalty.
OVERLAP_MARGIN = 1.1
# Alignment, crowding and cohesion always count towards the averaging denominator.
BASE_FORCE_COUNT = 3


@dataclass(slots=True)
class SteeringResult:
    heading: Vector2
    influence: InfluenceKind
    influence_strength: float
    neighbor_count: int


def is_in_front(position: Vector2, heading: Vector2, target: Vector2) -> bool:
    return heading.dot(direction_to(position, target)) > 0.0


def visible_neighbors(agent: Agent, candidates: Iterable[Agent], out: List[Agent] | None = None) -> List[Agent]:
    neighbors = out if out is not None else []
    neighbors.clear()
    position = agent.position
    heading = agent.heading
    sight_radius = agent.sight_radius
    for other in candidates:
        if other is agent:
            continue
        if other.position.distance_to(position) > sight_radius:
            continue
        if not is_in_front(position, heading, other.position):
            continue
        neighbors.append(other)
    return neighbors


def crowding(agent: Agent, neighbors: List[Agent], overlap_penalty: float) -> Vector2:
    accum_x = 0.0
    accum_y = 0.0
    count = 0
    position = agent.position
    overlap_distance = agent.radius * OVERLAP_MARGIN
    for other in neighbors:
        distance = other.position.distance_to(position)
        if distance > agent.proximity_radius:
            continue
        toward = direction_to(position, other.position)
        radial_point = position + toward * agent.proximity_radius
        force = other.position.distance_to(radial_point) * agent.crowding_severity
        if distance < overlap_distance:
            force += overlap_penalty
        away = direction_to(other.position, position)
        accum_x += away.x * force
        accum_y += away.y * force
        count += 1
    if count == 0:
        return Vector2()
    inv = 1.0 / count
    return Vector2(accum_x * inv, accum_y * inv)


def alignment(neighbors: List[Agent]) -> Vector2:
    sum_x = 0.0
    sum_y = 0.0
    for other in neighbors:
        sum_x += other.heading.x
        sum_y += other.heading.y
    return safe_normalize_xy(sum_x, sum_y)


def cohesion(agent: Agent, neighbors: List[Agent]) -> Vector2:
    if not neighbors:
        return Vector2()
    sum_x = 0.0
    sum_y = 0.0
    for other in neighbors:
        sum_x += other.position.x
        sum_y += other.position.y
    inv = 1.0 / len(neighbors)
    return direction_to(agent.position, Vector2(sum_x * inv, sum_y * inv))


def dominant_influence(
    crowding_force: Vector2,
    alignment_force: Vector2,
    cohesion_force: Vector2,
    field_force: Vector2,
) -> tuple[InfluenceKind, float]:
    crowding_factor = crowding_force.length()
    cohesion_factor = alignment_force.length() + cohesion_force.length()
    field_factor = field_force.length()
    if crowding_factor == 0.0 and cohesion_factor == 0.0 and field_factor == 0.0:
        return InfluenceKind.NONE, 0.0
    if crowding_factor >= cohesion_factor and crowding_factor >= field_factor:
        return InfluenceKind.CROWDING, crowding_factor
    if cohesion_factor >= field_factor:
        return InfluenceKind.COHESION, cohesion_factor
    return InfluenceKind.FIELD, field_factor


def compute_desired_heading(
    agent: Agent,
    neighbors: List[Agent],
    forces: FieldForces,
    overlap_penalty: float,
) -> SteeringResult:
    """Blend crowding, alignment, cohesion and field pushes into one direction.

    Reads only the current positions and headings of ``agent`` and its
    neighbours, so every agent in a tick can be evaluated against the same
    snapshot before any of them moves.
    """
    crowding_force = crowding(agent, neighbors, overlap_penalty)
    alignment_force = alignment(neighbors)
    cohesion_force = cohesion(agent, neighbors)
    field_force = forces.total(agent.id)
    field_count = forces.count(agent.id)

    influence, strength = dominant_influence(crowding_force, alignment_force, cohesion_force, field_force)

    combined = Vector2(field_force)
    accumulate(combined, alignment_force)
    accumulate(combined, crowding_force)
    accumulate(combined, cohesion_force)
    combined /= BASE_FORCE_COUNT + field_count
    heading = safe_normalize(combined)
    if heading.length_squared() == 0.0:
        heading = Vector2(agent.heading)
    return SteeringResult(
        heading=heading,
        influence=influence,
        influence_strength=strength,
        neighbor_count=len(neighbors),
    )


def turn_toward(current: Vector2, desired: Vector2, max_turn_degrees: float) -> Vector2:
    if desired.length_squared() == 0.0:
        return Vector2(current)
    current_angle = angle_degrees(current)
    desired_angle = angle_degrees(desired)
    left = (desired_angle - current_angle + 360.0) % 360.0
    right = (current_angle - desired_angle + 360.0) % 360.0
    if left < right:
        rotation = min(max_turn_degrees, left)
    else:
        rotation = -min(max_turn_degrees, right)
    return from_angle_degrees((current_angle + rotation + 360.0) % 360.0)


def advance(position: Vector2, heading: Vector2, speed: float, arena_size: Vector2) -> Vector2:
    return wrap_position(position + heading * speed, arena_size)


def move(entity: Agent | Predator, desired_heading: Vector2) -> None:
    """Turn at most ``turn_rate`` degrees toward the desired heading, then step forward."""
    entity.heading = turn_toward(entity.heading, desired_heading, entity.turn_rate)
    entity.position = advance(entity.position, entity.heading, entity.speed, entity.arena_size)
