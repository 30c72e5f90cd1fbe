from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .errors import ConfigurationError
from .field import Falloff


@dataclass
class AgentConfig:
    count: int = 50
    speed: float = 3.0
    turn_rate: float = 10.0
    radius: float = 7.0
    proximity_radius: float = 40.0
    sight_radius: float = 200.0
    crowding_severity: float = 20.0
    # Uniform +/- offset applied when an agent is dropped at the pointer.
    spawn_jitter: float = 10.0
    random_headings: bool = False


@dataclass
class PredatorConfig:
    speed: float = 10.0
    turn_rate: float = 12.0
    radius: float = 10.0
    sight_radius: float = 200.0
    field_strength: float = 40000.0
    field_radius: float = 200.0
    field_falloff: str = "quadratic"


@dataclass
class PointerFieldConfig:
    strength: float = 4000.0
    radius: float = 200.0
    falloff: str = "linear"


@dataclass
class EmitterSpawnConfig:
    attractor_strength: tuple[float, float] = (3000.0, 6000.0)
    repulsor_strength: tuple[float, float] = (1000.0, 4000.0)
    radius: tuple[float, float] = (25.0, 150.0)
    falloff: str = "linear"


@dataclass
class SwarmConfig:
    arena_width: float = 800.0
    arena_height: float = 600.0
    tick_interval: float = 0.05
    seed: int = 42
    overlap_penalty: float = 1_000_000.0
    cell_size: float = 100.0
    check_invariants: bool = True
    config_version: str = "v1"
    agents: AgentConfig = field(default_factory=AgentConfig)
    predators: PredatorConfig = field(default_factory=PredatorConfig)
    pointer: PointerFieldConfig = field(default_factory=PointerFieldConfig)
    emitters: EmitterSpawnConfig = field(default_factory=EmitterSpawnConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SwarmConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


_SECTIONS = ("agents", "predators", "pointer", "emitters")


def _section(raw: dict, name: str) -> dict:
    # an empty YAML section ("agents:") loads as None
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Config section {name!r} must be a mapping, got {type(value).__name__}")
    return value


def load_config(raw: dict) -> SwarmConfig:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Swarm config must be a mapping, got {type(raw).__name__}")
    default_emitters = EmitterSpawnConfig()

    def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
        if value is None:
            return default
        if isinstance(value, (tuple, list)) and len(value) == 2:
            try:
                return (float(value[0]), float(value[1]))
            except (TypeError, ValueError):
                raise ConfigurationError(f"Expected a numeric [low, high] pair, got {value!r}") from None
        raise ConfigurationError(f"Expected a [low, high] pair, got {value!r}")

    agents_raw = _section(raw, "agents")
    predators_raw = _section(raw, "predators")
    pointer_raw = _section(raw, "pointer")
    emitters_raw = _section(raw, "emitters")
    emitters = EmitterSpawnConfig(
        attractor_strength=_pair(emitters_raw.get("attractor_strength"), default_emitters.attractor_strength),
        repulsor_strength=_pair(emitters_raw.get("repulsor_strength"), default_emitters.repulsor_strength),
        radius=_pair(emitters_raw.get("radius"), default_emitters.radius),
        falloff=emitters_raw.get("falloff", default_emitters.falloff),
    )
    try:
        agents = AgentConfig(**agents_raw)
        predators = PredatorConfig(**predators_raw)
        pointer = PointerFieldConfig(**pointer_raw)
        swarm_values = {k: v for k, v in raw.items() if k not in _SECTIONS}
        config = SwarmConfig(agents=agents, predators=predators, pointer=pointer, emitters=emitters, **swarm_values)
    except TypeError as exc:
        raise ConfigurationError(f"Unknown swarm config option: {exc}") from exc
    validate_config(config)
    return config


def validate_config(config: SwarmConfig) -> None:
    try:
        _check_config(config)
    except ConfigurationError:
        raise
    except (TypeError, ValueError, OverflowError) as exc:
        # wrong-typed values such as speed: "3" or count: .nan
        raise ConfigurationError(f"Invalid swarm config value: {exc}") from exc


def _check_config(config: SwarmConfig) -> None:
    def _positive(name: str, value: float) -> None:
        if not value > 0.0:
            raise ConfigurationError(f"{name} must be positive, got {value}")

    def _non_negative(name: str, value: float) -> None:
        if not value >= 0.0:
            raise ConfigurationError(f"{name} must be non-negative, got {value}")

    def _range(name: str, bounds: tuple[float, float], positive: bool) -> None:
        low, high = bounds
        if low > high:
            raise ConfigurationError(f"{name} range is inverted: {bounds}")
        if positive:
            _positive(f"{name}[0]", low)
        else:
            _non_negative(f"{name}[0]", low)

    _positive("arena_width", config.arena_width)
    _positive("arena_height", config.arena_height)
    _positive("tick_interval", config.tick_interval)
    _positive("cell_size", config.cell_size)
    _non_negative("overlap_penalty", config.overlap_penalty)

    agents = config.agents
    if int(agents.count) != agents.count or agents.count < 0:
        raise ConfigurationError(f"agents.count must be a non-negative integer, got {agents.count}")
    _positive("agents.speed", agents.speed)
    _positive("agents.turn_rate", agents.turn_rate)
    _positive("agents.radius", agents.radius)
    _positive("agents.sight_radius", agents.sight_radius)
    _non_negative("agents.proximity_radius", agents.proximity_radius)
    if agents.proximity_radius < agents.radius:
        raise ConfigurationError(
            f"agents.proximity_radius ({agents.proximity_radius}) must be >= agents.radius ({agents.radius})"
        )
    _non_negative("agents.crowding_severity", agents.crowding_severity)
    _non_negative("agents.spawn_jitter", agents.spawn_jitter)

    predators = config.predators
    _positive("predators.speed", predators.speed)
    _positive("predators.turn_rate", predators.turn_rate)
    _positive("predators.radius", predators.radius)
    _positive("predators.sight_radius", predators.sight_radius)
    _non_negative("predators.field_strength", predators.field_strength)
    _positive("predators.field_radius", predators.field_radius)
    Falloff.parse(predators.field_falloff)

    _non_negative("pointer.strength", config.pointer.strength)
    _positive("pointer.radius", config.pointer.radius)
    Falloff.parse(config.pointer.falloff)

    emitters = config.emitters
    _range("emitters.attractor_strength", emitters.attractor_strength, positive=False)
    _range("emitters.repulsor_strength", emitters.repulsor_strength, positive=False)
    _range("emitters.radius", emitters.radius, positive=True)
    Falloff.parse(emitters.falloff)
