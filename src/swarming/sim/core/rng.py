from __future__ import annotations

import math
import random

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def reset(self, seed: int | None = None) -> None:
        if seed is not None:
            self._seed = seed
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_point(self, width: float, height: float) -> Vector2:
        return Vector2(self._random.uniform(0.0, width), self._random.uniform(0.0, height))

    def next_jitter(self, amount: float) -> Vector2:
        return Vector2(self._random.uniform(-amount, amount), self._random.uniform(-amount, amount))

    def next_unit_circle(self) -> Vector2:
        angle = self._random.uniform(0, 2 * math.pi)
        vector = Vector2()
        vector.from_polar((1, math.degrees(angle)))
        return vector
