# rectscan/geometry/primitives.py
from __future__ import annotations
from typing import Sequence, Tuple
import math

from rectscan.core.contracts import Point, RectangleCandidate


def round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def distance(a: Point, b: Point) -> float:
    return math.hypot(float(a[0] - b[0]), float(a[1] - b[1]))


def point_line_distance(p: Point, start: Point, end: Point) -> float:
    """
    Perpendicular distance from p to the line through start and end.
    Falls back to the straight distance to start when start == end.
    """
    dx = float(end[0] - start[0])
    dy = float(end[1] - start[1])
    length = math.hypot(dx, dy)
    if length == 0.0:
        return distance(p, start)
    cross = dx * float(p[1] - start[1]) - dy * float(p[0] - start[0])
    return abs(cross) / length


def path_length(points: Sequence[Point]) -> float:
    """Sum of consecutive point-to-point distances (open path, no closing edge)."""
    return sum(distance(points[i - 1], points[i]) for i in range(1, len(points)))


def bounding_box(points: Sequence[Point]) -> Tuple[int, int, int, int]:
    """(min_x, min_y, max_x, max_y) of a non-empty point list."""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def is_valid_box(width: float, height: float, min_area: float, max_aspect_ratio: float) -> bool:
    """Positive sides, area >= min_area and long/short side ratio <= max_aspect_ratio."""
    if width <= 0 or height <= 0:
        return False
    if width * height < min_area:
        return False
    return max(width, height) / min(width, height) <= max_aspect_ratio


def overlap_ratio(a: RectangleCandidate, b: RectangleCandidate) -> float:
    """
    Intersection area over the smaller of the two areas (not IoU): a box fully
    inside another scores 1.0.
    """
    x1 = max(a.x, b.x)
    y1 = max(a.y, b.y)
    x2 = min(a.x + a.width, b.x + b.width)
    y2 = min(a.y + a.height, b.y + b.height)
    if x2 <= x1 or y2 <= y1:
        return 0.0
    smaller = min(a.area, b.area)
    if smaller <= 0:
        return 0.0
    return (x2 - x1) * (y2 - y1) / float(smaller)
