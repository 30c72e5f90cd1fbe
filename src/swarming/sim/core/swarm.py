from __future__ import annotations

import logging
from itertools import chain
from time import perf_counter
from typing import Any, Dict, List, Tuple

from pygame.math import Vector2

from ..systems import metrics as metrics_system
from ..systems import predation, pursuit, steering
from ..systems.fields import FieldForces, apply_fields
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotArena, SnapshotMetadata
from ..utils.math2d import angle_degrees, is_finite
from .agent import Agent
from .config import SwarmConfig, validate_config
from .errors import InvariantViolationError
from .field import Falloff, FieldKind, ForceField
from .predator import Predator
from .rng import DeterministicRng
from .spatial_grid import SpatialGrid

logger = logging.getLogger(__name__)

_HEADING_TOLERANCE = 1e-6


class Swarm:
    """Owns every agent, predator and field of one arena and advances them a tick at a time."""

    def __init__(self, config: SwarmConfig | None = None):
        config = config if config is not None else SwarmConfig()
        validate_config(config)
        self._install(config)

    @property
    def config(self) -> SwarmConfig:
        return self._config

    @property
    def rng(self) -> DeterministicRng:
        return self._rng

    @property
    def arena_size(self) -> Vector2:
        return Vector2(self._arena_size)

    @property
    def agents(self) -> Tuple[Agent, ...]:
        return tuple(self._agents)

    @property
    def predators(self) -> Tuple[Predator, ...]:
        return tuple(self._predators)

    @property
    def fields(self) -> Tuple[ForceField, ...]:
        return tuple(self._fields)

    @property
    def pointer_field(self) -> ForceField | None:
        return self._pointer_field

    @property
    def pointer_active(self) -> bool:
        return self._pointer_active and self._pointer_field is not None

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def reset(self, config: SwarmConfig | None = None) -> None:
        config = config if config is not None else self._config
        # Validate before discarding anything so a bad config leaves the old run intact.
        validate_config(config)
        self._install(config)

    def add_agent(self, position: Vector2) -> None:
        agent = self._spawn_agent(Vector2(position))
        self._agents.append(agent)
        logger.debug("Added agent %d at (%.1f, %.1f)", agent.id, agent.position.x, agent.position.y)

    def add_predator(self, position: Vector2) -> None:
        settings = self._config.predators
        predator = Predator(
            id=self._allocate_id(),
            position=Vector2(position),
            speed=settings.speed,
            turn_rate=settings.turn_rate,
            radius=settings.radius,
            sight_radius=settings.sight_radius,
            arena_size=self._arena_size,
            field_strength=settings.field_strength,
            field_radius=settings.field_radius,
            field_falloff=settings.field_falloff,
        )
        self._predators.append(predator)
        logger.debug("Added predator %d at (%.1f, %.1f)", predator.id, predator.position.x, predator.position.y)

    def add_field(
        self,
        position: Vector2,
        strength: float,
        radius: float,
        falloff: Falloff | str = Falloff.LINEAR,
        repels: bool = False,
    ) -> None:
        emitter = ForceField(
            position=Vector2(position),
            strength=strength,
            radius=radius,
            falloff=falloff,
            repels=repels,
            kind=FieldKind.USER,
        )
        self._fields.append(emitter)
        logger.debug(
            "Added %s field at (%.1f, %.1f) strength=%.1f radius=%.1f",
            "repulsive" if repels else "attractive",
            emitter.position.x,
            emitter.position.y,
            strength,
            radius,
        )

    def set_pointer_field(self, position: Vector2, repels: bool, active: bool) -> None:
        pointer = self._config.pointer
        self._pointer_field = ForceField(
            position=Vector2(position),
            strength=pointer.strength,
            radius=pointer.radius,
            falloff=pointer.falloff,
            repels=repels,
            kind=FieldKind.POINTER,
        )
        self._pointer_active = active

    def visible_neighbors(self, agent: Agent) -> List[Agent]:
        return steering.visible_neighbors(agent, self._agents)

    def tick(self) -> TickMetrics:
        start = perf_counter()
        forces = self._forces
        forces.clear()

        eaten = predation.find_eaten(self._agents, self._predators)
        if eaten:
            self._agents = predation.remove_eaten(self._agents, eaten)
            logger.debug("Tick %d: %d agent(s) eaten", self._tick, len(eaten))
        agents = self._agents

        apply_fields(self._fields, agents, forces)
        if self.pointer_active:
            self._pointer_field.apply(agents, forces)

        predator_headings = [pursuit.compute_pursuit_heading(predator, agents) for predator in self._predators]
        for predator, heading in zip(self._predators, predator_headings):
            pursuit.move_predator(predator, heading, agents, forces)

        self._grid.rebuild(agents)
        neighbor_checks = 0
        results: List[steering.SteeringResult] = []
        penalty = self._config.overlap_penalty
        for agent in agents:
            neighbor_checks += self._collect_visible(agent)
            results.append(steering.compute_desired_heading(agent, self._neighbor_scratch, forces, penalty))
        for agent, result in zip(agents, results):
            agent.influence = result.influence
            agent.influence_strength = result.influence_strength
            steering.move(agent, result.heading)
        forces.clear()

        if self._config.check_invariants:
            self._verify_invariants()

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(
            tick=self._tick,
            agents=agents,
            predators=len(self._predators),
            fields=len(self._fields),
            eaten=len(eaten),
            neighbor_checks=neighbor_checks,
            duration_ms=duration_ms,
        )
        self._tick += 1
        return self._metrics

    def snapshot(self) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else self._empty_metrics()
        config = self._config
        metadata = SnapshotMetadata(
            tick_interval=config.tick_interval,
            tick_rate=0.0 if config.tick_interval <= 0 else 1.0 / config.tick_interval,
            seed=config.seed,
            config_version=config.config_version,
        )
        emitters = list(self._fields)
        if self.pointer_active:
            emitters.append(self._pointer_field)
        emitters.extend(predator.emitter for predator in self._predators)
        return Snapshot(
            tick=self._tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            predators=[self._predator_snapshot(predator) for predator in self._predators],
            fields=[self._field_snapshot(emitter) for emitter in emitters],
            arena=SnapshotArena(width=self._arena_size.x, height=self._arena_size.y),
            metadata=metadata,
        )

    def _install(self, config: SwarmConfig) -> None:
        self._config = config
        self._arena_size = Vector2(config.arena_width, config.arena_height)
        self._rng = DeterministicRng(config.seed)
        self._grid = SpatialGrid(config.cell_size)
        self._forces = FieldForces()
        self._agents: List[Agent] = []
        self._predators: List[Predator] = []
        self._fields: List[ForceField] = []
        self._pointer_field: ForceField | None = None
        self._pointer_active = False
        self._neighbor_scratch: List[Agent] = []
        self._candidate_scratch: List[Agent] = []
        self._next_id = 0
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self._bootstrap_population()
        logger.info(
            "Swarm reset: %d agents in %.0fx%.0f arena (seed=%d)",
            len(self._agents),
            config.arena_width,
            config.arena_height,
            config.seed,
        )

    def _bootstrap_population(self) -> None:
        for _ in range(int(self._config.agents.count)):
            position = self._rng.next_point(self._arena_size.x, self._arena_size.y)
            self._agents.append(self._spawn_agent(position))

    def _spawn_agent(self, position: Vector2) -> Agent:
        settings = self._config.agents
        heading = self._rng.next_unit_circle() if settings.random_headings else Vector2(1.0, 0.0)
        return Agent(
            id=self._allocate_id(),
            position=position,
            heading=heading,
            speed=settings.speed,
            turn_rate=settings.turn_rate,
            radius=settings.radius,
            proximity_radius=settings.proximity_radius,
            sight_radius=settings.sight_radius,
            crowding_severity=settings.crowding_severity,
            arena_size=self._arena_size,
        )

    def _allocate_id(self) -> int:
        entity_id = self._next_id
        self._next_id += 1
        return entity_id

    def _collect_visible(self, agent: Agent) -> int:
        checks = self._grid.collect_neighbors(
            agent.position,
            agent.sight_radius,
            self._candidate_scratch,
            exclude_id=agent.id,
        )
        steering.visible_neighbors(agent, self._candidate_scratch, self._neighbor_scratch)
        return checks

    def _verify_invariants(self) -> None:
        width = self._arena_size.x
        height = self._arena_size.y
        for entity in chain(self._agents, self._predators):
            problem = None
            if not is_finite(entity.position) or not is_finite(entity.heading):
                problem = "non-finite state"
            elif abs(entity.heading.length() - 1.0) > _HEADING_TOLERANCE:
                problem = f"heading length {entity.heading.length():.9f}"
            elif not (0.0 <= entity.position.x < width and 0.0 <= entity.position.y < height):
                problem = f"position ({entity.position.x}, {entity.position.y}) outside arena"
            if problem is not None:
                kind = "predator" if isinstance(entity, Predator) else "agent"
                logger.error("Tick %d: %s %d invariant violated: %s", self._tick, kind, entity.id, problem)
                raise InvariantViolationError(f"Tick {self._tick}: {kind} {entity.id} {problem}")

    def _empty_metrics(self) -> TickMetrics:
        return metrics_system.create_metrics(
            tick=self._tick,
            agents=self._agents,
            predators=len(self._predators),
            fields=len(self._fields),
            eaten=0,
            neighbor_checks=0,
            duration_ms=0.0,
        )

    @staticmethod
    def _agent_snapshot(agent: Agent) -> Dict[str, Any]:
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "hx": agent.heading.x,
            "hy": agent.heading.y,
            "heading": angle_degrees(agent.heading),
            "radius": agent.radius,
            "influence": agent.influence.value,
            "influence_strength": agent.influence_strength,
        }

    @staticmethod
    def _predator_snapshot(predator: Predator) -> Dict[str, Any]:
        return {
            "id": predator.id,
            "x": predator.position.x,
            "y": predator.position.y,
            "hx": predator.heading.x,
            "hy": predator.heading.y,
            "heading": angle_degrees(predator.heading),
            "radius": predator.radius,
            "field_radius": predator.emitter.radius,
        }

    @staticmethod
    def _field_snapshot(emitter: ForceField) -> Dict[str, Any]:
        return {
            "x": emitter.position.x,
            "y": emitter.position.y,
            "strength": emitter.strength,
            "radius": emitter.radius,
            "falloff": emitter.falloff.value,
            "repels": emitter.repels,
            "kind": emitter.kind.value,
        }
