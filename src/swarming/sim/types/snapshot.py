from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    agents: List[Dict[str, Any]]
    predators: List[Dict[str, Any]]
    fields: List[Dict[str, Any]]
    arena: "SnapshotArena"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotArena:
    width: float
    height: float


@dataclass(slots=True)
class SnapshotMetadata:
    tick_interval: float
    tick_rate: float
    seed: int
    config_version: str
