from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    predators: int
    fields: int
    eaten: int
    neighbor_checks: int
    crowding: int
    cohesion: int
    field: int
    tick_duration_ms: float = 0.0
