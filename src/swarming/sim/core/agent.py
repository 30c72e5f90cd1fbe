from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pygame.math import Vector2

from ..utils.math2d import is_finite, safe_normalize, wrap_coordinate
from .errors import ConfigurationError


class InfluenceKind(str, Enum):
    NONE = "none"
    CROWDING = "crowding"
    COHESION = "cohesion"
    FIELD = "field"


def validate_kinematics(
    label: str,
    position: Vector2,
    heading: Vector2,
    speed: float,
    turn_rate: float,
    radius: float,
    sight_radius: float,
    arena_size: Vector2,
) -> None:
    if not arena_size.x > 0.0 or not arena_size.y > 0.0:
        raise ConfigurationError(f"{label} arena size must be positive, got ({arena_size.x}, {arena_size.y})")
    if not is_finite(position):
        raise ConfigurationError(f"{label} position must be finite, got ({position.x}, {position.y})")
    if not is_finite(heading) or heading.length_squared() < 1e-12:
        raise ConfigurationError(f"{label} heading must be a finite non-zero vector")
    if not speed > 0.0:
        raise ConfigurationError(f"{label} speed must be positive, got {speed}")
    if not turn_rate > 0.0:
        raise ConfigurationError(f"{label} turn rate must be positive, got {turn_rate}")
    if not radius > 0.0:
        raise ConfigurationError(f"{label} radius must be positive, got {radius}")
    if not sight_radius > 0.0:
        raise ConfigurationError(f"{label} sight radius must be positive, got {sight_radius}")


def wrap_position(position: Vector2, arena_size: Vector2) -> Vector2:
    return Vector2(wrap_coordinate(position.x, arena_size.x), wrap_coordinate(position.y, arena_size.y))


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector2
    speed: float
    turn_rate: float
    radius: float
    proximity_radius: float
    sight_radius: float
    crowding_severity: float
    arena_size: Vector2
    heading: Vector2 = field(default_factory=lambda: Vector2(1.0, 0.0))
    influence: InfluenceKind = InfluenceKind.NONE
    influence_strength: float = 0.0

    def __post_init__(self) -> None:
        self.position = Vector2(self.position)
        self.heading = Vector2(self.heading)
        self.arena_size = Vector2(self.arena_size)
        validate_kinematics(
            f"Agent {self.id}",
            self.position,
            self.heading,
            self.speed,
            self.turn_rate,
            self.radius,
            self.sight_radius,
            self.arena_size,
        )
        if not self.proximity_radius >= 0.0:
            raise ConfigurationError(f"Agent {self.id} proximity radius must be non-negative, got {self.proximity_radius}")
        if self.proximity_radius < self.radius:
            raise ConfigurationError(
                f"Agent {self.id} proximity radius ({self.proximity_radius}) must be >= radius ({self.radius})"
            )
        if not self.crowding_severity >= 0.0:
            raise ConfigurationError(
                f"Agent {self.id} crowding severity must be non-negative, got {self.crowding_severity}"
            )
        self.heading = safe_normalize(self.heading)
        self.position = wrap_position(self.position, self.arena_size)
