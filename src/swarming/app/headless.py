from __future__ import annotations

import argparse
import csv
import json
import logging
import math
import time
from pathlib import Path
from typing import Optional

from pygame.math import Vector2

from ..sim.core.config import SwarmConfig
from ..sim.core.swarm import Swarm
from ..sim.types.metrics import TickMetrics
from .controls import Command, SwarmControls

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "tick",
    "population",
    "predators",
    "eaten",
    "neighbor_checks",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "predators",
    "fields",
    "eaten",
    "neighbor_checks",
    "crowding",
    "cohesion",
    "field",
    "tick_ms",
    "neighbor_checks_per_agent",
    "tick_ms_per_agent",
    "crowding_ratio",
    "cohesion_ratio",
    "field_ratio",
    "polarization",
    "spread",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.predators,
        metrics.eaten,
        metrics.neighbor_checks,
        f"{tick_ms:.3f}",
    ]


def _flock_shape(swarm: Swarm) -> tuple[float, float]:
    """Polarization (length of the mean heading) and mean distance to the centroid."""
    agents = swarm.agents
    if not agents:
        return 0.0, 0.0
    heading_x = 0.0
    heading_y = 0.0
    centroid_x = 0.0
    centroid_y = 0.0
    for agent in agents:
        heading_x += agent.heading.x
        heading_y += agent.heading.y
        centroid_x += agent.position.x
        centroid_y += agent.position.y
    count = len(agents)
    polarization = math.hypot(heading_x, heading_y) / count
    centroid = Vector2(centroid_x / count, centroid_y / count)
    spread = sum(agent.position.distance_to(centroid) for agent in agents) / count
    return polarization, spread


def _format_detailed_row(swarm: Swarm, metrics: TickMetrics, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        neighbor_checks_per_agent = 0.0
        tick_ms_per_agent = 0.0
        crowding_ratio = 0.0
        cohesion_ratio = 0.0
        field_ratio = 0.0
    else:
        neighbor_checks_per_agent = metrics.neighbor_checks / population
        tick_ms_per_agent = tick_ms / population
        crowding_ratio = metrics.crowding / population
        cohesion_ratio = metrics.cohesion / population
        field_ratio = metrics.field / population
    polarization, spread = _flock_shape(swarm)

    return [
        metrics.tick,
        population,
        metrics.predators,
        metrics.fields,
        metrics.eaten,
        metrics.neighbor_checks,
        metrics.crowding,
        metrics.cohesion,
        metrics.field,
        f"{tick_ms:.3f}",
        f"{neighbor_checks_per_agent:.4f}",
        f"{tick_ms_per_agent:.4f}",
        f"{crowding_ratio:.4f}",
        f"{cohesion_ratio:.4f}",
        f"{field_ratio:.4f}",
        f"{polarization:.4f}",
        f"{spread:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    total = sum(values)
    count = len(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(total / count),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p95": _percentile(sorted_values, 0.95),
        "p99": _percentile(sorted_values, 0.99),
    }


def _populate(swarm: Swarm, predators: int, attractors: int, repulsors: int) -> None:
    controls = SwarmControls(swarm)
    arena = swarm.arena_size
    for _ in range(max(0, predators)):
        controls.execute(Command.ADD_PREDATOR)
    for command, count in ((Command.ADD_ATTRACTOR, attractors), (Command.ADD_REPULSOR, repulsors)):
        for _ in range(max(0, count)):
            controls.pointer = swarm.rng.next_point(arena.x, arena.y)
            controls.execute(command)


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 5000,
    config_path: Optional[Path] = None,
    predators: int = 0,
    attractors: int = 0,
    repulsors: int = 0,
    realtime: bool = False,
) -> Swarm:
    config = SwarmConfig.from_yaml(config_path) if config_path else SwarmConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    swarm = Swarm(config)
    _populate(swarm, predators, attractors, repulsors)
    logger.info(
        "Running %d ticks: %d agents, %d predators, %d fields",
        steps,
        len(swarm.agents),
        len(swarm.predators),
        len(swarm.fields),
    )

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    population_series: list[int] = []
    neighbor_checks_series: list[int] = []
    total_eaten = 0
    max_tick_ms = (-1.0, -1)
    max_neighbor_checks = (-1, -1)
    extinct_at: int | None = None

    try:
        for tick in range(steps):
            tick_start = time.perf_counter()
            metrics = swarm.tick()
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            total_eaten += metrics.eaten
            if extinct_at is None and metrics.population == 0 and metrics.eaten > 0:
                extinct_at = tick
                logger.info("Flock wiped out at tick %d", tick)

            if summary_path:
                tick_ms_series.append(tick_ms)
                population_series.append(metrics.population)
                neighbor_checks_series.append(metrics.neighbor_checks)
                if tick_ms > max_tick_ms[0]:
                    max_tick_ms = (tick_ms, tick)
                if metrics.neighbor_checks > max_neighbor_checks[0]:
                    max_neighbor_checks = (metrics.neighbor_checks, tick)

            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(swarm, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))

            if realtime:
                remaining = config.tick_interval - (time.perf_counter() - tick_start)
                if remaining > 0:
                    time.sleep(remaining)
    finally:
        if csv_file:
            csv_file.close()

    logger.info("Finished %d ticks: %d agents left, %d eaten", steps, len(swarm.agents), total_eaten)

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "final_population": len(swarm.agents),
            "total_eaten": total_eaten,
            "extinct_at": extinct_at,
            "tick_ms": _summary_stats(tick_ms_series),
            "population": _summary_stats([float(v) for v in population_series]),
            "neighbor_checks": _summary_stats([float(v) for v in neighbor_checks_series]),
            "peaks": {
                "tick_ms": {"value": float(max_tick_ms[0]), "tick": max_tick_ms[1]},
                "neighbor_checks": {"value": max_neighbor_checks[0], "tick": max_neighbor_checks[1]},
            },
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "population": _summary_stats([float(v) for v in population_series[tail_slice]]),
                "neighbor_checks": _summary_stats([float(v) for v in neighbor_checks_series[tail_slice]]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return swarm


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless swarm simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with swarm settings")
    parser.add_argument("--predators", type=int, default=0, help="Predators dropped at random positions")
    parser.add_argument("--attractors", type=int, default=0, help="Attractive fields dropped at random positions")
    parser.add_argument("--repulsors", type=int, default=0, help="Repulsive fields dropped at random positions")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=5000,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--realtime", action="store_true", help="Pace ticks at the configured tick interval.")
    parser.add_argument("--verbose", action="store_true", help="Log entity additions and predation events.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config_path=args.config,
        predators=args.predators,
        attractors=args.attractors,
        repulsors=args.repulsors,
        realtime=args.realtime,
    )


if __name__ == "__main__":
    main()
