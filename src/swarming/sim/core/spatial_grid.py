from __future__ import annotations

import math
from typing import TYPE_CHECKING, Dict, List, Tuple

from pygame.math import Vector2

if TYPE_CHECKING:
    from .agent import Agent


class SpatialGrid:
    """Uniform bucket grid used as a broad phase for radius queries.

    Results are exact (every candidate is distance checked), so a query
    returns the same set as a brute-force scan.
    """

    def __init__(self, cell_size: float) -> None:
        self._cell_size = cell_size
        self._cells: Dict[Tuple[int, int], List["Agent"]] = {}
        self._active_keys: List[Tuple[int, int]] = []
        self._offset_cache: Dict[float, List[Tuple[int, int]]] = {}

    @property
    def cell_size(self) -> float:
        return self._cell_size

    def build_neighbor_cell_offsets(self, radius: float) -> List[Tuple[int, int]]:
        offsets = self._offset_cache.get(radius)
        if offsets is None:
            cell_range = int(math.ceil(radius / self._cell_size))
            offsets = [
                (dx, dy) for dx in range(-cell_range, cell_range + 1) for dy in range(-cell_range, cell_range + 1)
            ]
            self._offset_cache[radius] = offsets
        return offsets

    def clear(self) -> None:
        for key in self._active_keys:
            bucket = self._cells.get(key)
            if bucket:
                bucket.clear()
        self._active_keys.clear()

    def rebuild(self, agents: List["Agent"]) -> None:
        self.clear()
        for agent in agents:
            self.insert(agent)

    def insert(self, agent: "Agent") -> None:
        key = self._cell_key(agent.position)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
            self._active_keys.append(key)
        elif not bucket:
            # Bucket exists but was cleared at the start of this tick; mark it active again.
            self._active_keys.append(key)
        bucket.append(agent)

    def collect_neighbors(
        self,
        position: Vector2,
        radius: float,
        out_agents: List["Agent"],
        exclude_id: int | None = None,
    ) -> int:
        """
        Fill ``out_agents`` with every inserted agent within ``radius`` of ``position``.

        Returns the number of candidates distance-checked, for metrics.
        """

        out_agents.clear()
        base_key = self._cell_key(position)
        radius_sq = radius * radius
        pos_x = position.x
        pos_y = position.y
        cells = self._cells
        append_agent = out_agents.append
        checks = 0

        for dx, dy in self.build_neighbor_cell_offsets(radius):
            bucket = cells.get((base_key[0] + dx, base_key[1] + dy))
            if not bucket:
                continue
            for agent in bucket:
                if exclude_id is not None and agent.id == exclude_id:
                    continue
                checks += 1
                pos = agent.position
                offset_x = pos.x - pos_x
                offset_y = pos.y - pos_y
                if offset_x * offset_x + offset_y * offset_y <= radius_sq:
                    append_agent(agent)
        return checks

    def _cell_key(self, position: Vector2) -> Tuple[int, int]:
        return (int(position.x // self._cell_size), int(position.y // self._cell_size))
