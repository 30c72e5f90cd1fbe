from __future__ import annotations

from pygame.math import Vector2

from swarming.sim.core.agent import Agent
from swarming.sim.core.rng import DeterministicRng
from swarming.sim.core.spatial_grid import SpatialGrid

ARENA = Vector2(800.0, 600.0)


def _make_agents(count: int, seed: int) -> list[Agent]:
    rng = DeterministicRng(seed)
    return [
        Agent(
            id=idx,
            position=rng.next_point(ARENA.x, ARENA.y),
            speed=3.0,
            turn_rate=10.0,
            radius=7.0,
            proximity_radius=40.0,
            sight_radius=200.0,
            crowding_severity=20.0,
            arena_size=ARENA,
        )
        for idx in range(count)
    ]


def test_neighbor_query_matches_bruteforce():
    agents = _make_agents(120, seed=11)
    grid = SpatialGrid(cell_size=60.0)
    grid.rebuild(agents)
    out: list[Agent] = []

    for center in (Vector2(0.0, 0.0), Vector2(400.0, 300.0), Vector2(799.0, 599.0), Vector2(123.0, 456.0)):
        for radius in (25.0, 90.0, 200.0):
            grid.collect_neighbors(center, radius, out)
            brute = sorted(a.id for a in agents if a.position.distance_squared_to(center) <= radius * radius)
            assert sorted(a.id for a in out) == brute


def test_collect_neighbors_excludes_self_and_counts_checks():
    agents = _make_agents(40, seed=3)
    grid = SpatialGrid(cell_size=100.0)
    grid.rebuild(agents)
    subject = agents[0]
    out: list[Agent] = [subject]

    checks = grid.collect_neighbors(subject.position, 150.0, out, exclude_id=subject.id)

    assert subject not in out
    assert checks >= len(out)
    brute = sorted(
        a.id for a in agents[1:] if a.position.distance_squared_to(subject.position) <= 150.0 * 150.0
    )
    assert sorted(a.id for a in out) == brute


def test_rebuild_drops_previous_contents():
    first = _make_agents(10, seed=1)
    grid = SpatialGrid(cell_size=50.0)
    grid.rebuild(first)
    grid.rebuild(first[:2])
    out: list[Agent] = []
    grid.collect_neighbors(Vector2(400.0, 300.0), 1000.0, out)
    assert sorted(a.id for a in out) == [0, 1]


def test_offsets_cover_radius():
    grid = SpatialGrid(cell_size=10.0)
    offsets = grid.build_neighbor_cell_offsets(25.0)
    assert len(offsets) == 7 * 7
    assert grid.build_neighbor_cell_offsets(25.0) is offsets
