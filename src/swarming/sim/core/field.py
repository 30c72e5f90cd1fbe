from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from pygame.math import Vector2

from ..utils.math2d import direction_to, is_finite
from .errors import ConfigurationError

if TYPE_CHECKING:
    from ..systems.fields import FieldForces
    from .agent import Agent


class Falloff(str, Enum):
    LINEAR = "linear"
    LOGARITHMIC = "logarithmic"
    QUADRATIC = "quadratic"

    @classmethod
    def parse(cls, value: "Falloff | str") -> "Falloff":
        if isinstance(value, Falloff):
            return value
        name = str(value).strip().lower()
        name = _FALLOFF_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise ConfigurationError(f"Unknown falloff: {value!r}") from None

    def amount(self, distance: float, strength: float) -> float:
        """How much of ``strength`` is lost at ``distance`` from the field centre."""
        if self is Falloff.LINEAR:
            return min(strength, distance)
        if self is Falloff.LOGARITHMIC:
            # ln(0) is -inf, which max(0, .) clamps to zero
            if distance <= 0.0:
                return 0.0
            return max(0.0, math.log(distance))
        if self is Falloff.QUADRATIC:
            return max(0.0, distance * distance)
        raise ConfigurationError(f"Unhandled falloff: {self!r}")


_FALLOFF_ALIASES = {"log": "logarithmic", "exp": "quadratic"}


class FieldKind(str, Enum):
    USER = "user"
    POINTER = "pointer"
    PREDATOR = "predator"


@dataclass(slots=True)
class ForceField:
    position: Vector2
    strength: float
    radius: float
    falloff: Falloff = Falloff.LINEAR
    repels: bool = False
    kind: FieldKind = FieldKind.USER

    def __post_init__(self) -> None:
        self.position = Vector2(self.position)
        self.falloff = Falloff.parse(self.falloff)
        if not is_finite(self.position):
            raise ConfigurationError(f"Field position must be finite, got ({self.position.x}, {self.position.y})")
        if not self.strength >= 0.0:
            raise ConfigurationError(f"Field strength must be non-negative, got {self.strength}")
        if not self.radius > 0.0:
            raise ConfigurationError(f"Field radius must be positive, got {self.radius}")

    def influence_at(self, distance: float) -> float:
        if distance > self.radius:
            return 0.0
        return max(0.0, self.strength - self.falloff.amount(distance, self.strength))

    def force_on(self, position: Vector2) -> Vector2 | None:
        """Directional push at ``position``, or ``None`` when out of range."""
        distance = position.distance_to(self.position)
        if distance > self.radius:
            return None
        influence = self.influence_at(distance)
        if self.repels:
            return direction_to(self.position, position) * influence
        return direction_to(position, self.position) * influence

    def apply(self, agents: Iterable["Agent"], forces: "FieldForces") -> int:
        affected = 0
        for agent in agents:
            force = self.force_on(agent.position)
            if force is None:
                continue
            forces.push(agent.id, force)
            affected += 1
        return affected
