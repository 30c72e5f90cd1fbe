from __future__ import annotations

import math

from pygame.math import Vector2

TWO_PI = 2.0 * math.pi


def safe_normalize(vector: Vector2) -> Vector2:
    return safe_normalize_xy(vector.x, vector.y)


def safe_normalize_xy(x: float, y: float) -> Vector2:
    magnitude_sq = x * x + y * y
    if magnitude_sq < 1e-24:
        return Vector2()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(x * inv, y * inv)


def angle_radians(vector: Vector2) -> float:
    angle = math.atan2(vector.y, vector.x)
    if angle < 0.0:
        angle += TWO_PI
    # atan2 of a tiny negative y can round up to exactly 2π
    return angle if angle < TWO_PI else 0.0


def angle_degrees(vector: Vector2) -> float:
    degrees = math.degrees(angle_radians(vector))
    return degrees if degrees < 360.0 else 0.0


def from_angle_degrees(degrees: float) -> Vector2:
    radians = math.radians(degrees)
    return Vector2(math.cos(radians), math.sin(radians))


def direction_to(origin: Vector2, target: Vector2) -> Vector2:
    return safe_normalize_xy(target.x - origin.x, target.y - origin.y)


def closest_point_on_segment(point: Vector2, start: Vector2, end: Vector2) -> Vector2:
    delta_x = end.x - start.x
    delta_y = end.y - start.y
    length_sq = delta_x * delta_x + delta_y * delta_y
    if length_sq == 0.0:
        return Vector2(start)
    t = ((point.x - start.x) * delta_x + (point.y - start.y) * delta_y) / length_sq
    t = _clamp_value(t, 0.0, 1.0)
    return Vector2(start.x + t * delta_x, start.y + t * delta_y)


def accumulate(target: Vector2, amount: Vector2) -> Vector2:
    """Add ``amount`` into ``target`` in place; used only for scratch sums."""
    target.x += amount.x
    target.y += amount.y
    return target


def wrap_coordinate(value: float, size: float) -> float:
    wrapped = math.fmod(value, size)
    if wrapped < 0.0:
        wrapped += size
    if wrapped >= size:
        wrapped = 0.0
    return wrapped


def is_finite(vector: Vector2) -> bool:
    return math.isfinite(vector.x) and math.isfinite(vector.y)


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))
