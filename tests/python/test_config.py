from __future__ import annotations

from pathlib import Path

import pytest

from swarming.sim.core.config import SwarmConfig, load_config, validate_config
from swarming.sim.core.errors import ConfigurationError

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_default_yaml_matches_dataclass_defaults():
    config = SwarmConfig.from_yaml(REPO_ROOT / "config" / "default.yaml")
    assert config == SwarmConfig()


def test_yaml_overrides_nested_sections(tmp_path):
    path = tmp_path / "swarm.yaml"
    path.write_text(
        "\n".join(
            [
                "seed: 9",
                "arena_width: 400",
                "agents:",
                "  count: 5",
                "  random_headings: true",
                "predators:",
                "  field_falloff: exp",
                "emitters:",
                "  radius: [10, 20]",
            ]
        )
    )

    config = SwarmConfig.from_yaml(path)

    assert config.seed == 9
    assert config.arena_width == 400
    assert config.arena_height == 600.0
    assert config.agents.count == 5
    assert config.agents.random_headings is True
    assert config.agents.speed == 3.0
    assert config.predators.field_falloff == "exp"
    assert config.emitters.radius == (10.0, 20.0)
    assert config.emitters.attractor_strength == (3000.0, 6000.0)


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert SwarmConfig.from_yaml(path) == SwarmConfig()


@pytest.mark.parametrize(
    "raw",
    [
        {"unknown_option": 1},
        {"agents": {"wings": 2}},
        {"agents": {"speed": 0}},
        {"agents": {"count": 2.5}},
        {"agents": {"radius": 12, "proximity_radius": 10}},
        {"predators": {"field_radius": -1}},
        {"pointer": {"falloff": "cubic"}},
        {"emitters": {"radius": [5]}},
        {"emitters": {"repulsor_strength": [10, 1]}},
        {"emitters": {"radius": [0, 10]}},
        {"cell_size": 0},
    ],
)
def test_invalid_values_raise(raw):
    with pytest.raises(ConfigurationError):
        load_config(raw)


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigurationError):
        SwarmConfig.from_yaml(path)


def test_configuration_error_is_a_value_error():
    config = SwarmConfig(overlap_penalty=-1.0)
    with pytest.raises(ValueError):
        validate_config(config)


def test_empty_yaml_sections_fall_back_to_defaults(tmp_path):
    path = tmp_path / "sections.yaml"
    path.write_text("arena_width: 800\nagents:\nemitters:\n")
    assert SwarmConfig.from_yaml(path) == SwarmConfig()


@pytest.mark.parametrize(
    "raw",
    [
        {"agents": {"speed": "3"}},
        {"agents": {"count": float("nan")}},
        {"agents": {"count": float("inf")}},
        {"arena_width": None},
        {"emitters": {"radius": ["a", 10]}},
        {"agents": [1, 2]},
        {"emitters": "wide"},
    ],
)
def test_wrong_typed_values_raise_configuration_error(raw):
    with pytest.raises(ConfigurationError):
        load_config(raw)
