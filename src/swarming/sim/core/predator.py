from __future__ import annotations

from dataclasses import dataclass, field

from pygame.math import Vector2

from ..utils.math2d import safe_normalize
from .agent import validate_kinematics, wrap_position
from .errors import ConfigurationError
from .field import Falloff, FieldKind, ForceField


@dataclass(slots=True)
class Predator:
    """Hunts the nearest visible agent and drags a repulsive field along."""

    id: int
    position: Vector2
    speed: float
    turn_rate: float
    radius: float
    sight_radius: float
    arena_size: Vector2
    field_strength: float
    field_radius: float
    field_falloff: Falloff = Falloff.QUADRATIC
    heading: Vector2 = field(default_factory=lambda: Vector2(1.0, 0.0))
    emitter: ForceField = field(init=False)

    def __post_init__(self) -> None:
        self.position = Vector2(self.position)
        self.heading = Vector2(self.heading)
        self.arena_size = Vector2(self.arena_size)
        validate_kinematics(
            f"Predator {self.id}",
            self.position,
            self.heading,
            self.speed,
            self.turn_rate,
            self.radius,
            self.sight_radius,
            self.arena_size,
        )
        if not self.field_radius > 0.0:
            raise ConfigurationError(f"Predator {self.id} field radius must be positive, got {self.field_radius}")
        self.field_falloff = Falloff.parse(self.field_falloff)
        self.heading = safe_normalize(self.heading)
        self.position = wrap_position(self.position, self.arena_size)
        self.emitter = ForceField(
            position=self.position,
            strength=self.field_strength,
            radius=self.field_radius,
            falloff=self.field_falloff,
            repels=True,
            kind=FieldKind.PREDATOR,
        )

    def sync_emitter(self) -> ForceField:
        self.emitter.position = Vector2(self.position)
        return self.emitter
