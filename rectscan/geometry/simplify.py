# rectscan/geometry/simplify.py
from __future__ import annotations
from typing import List, Sequence, Tuple

from rectscan.core.contracts import Point, Polygon
from rectscan.geometry.primitives import distance, path_length, point_line_distance

DEFAULT_EPSILON_RATIO = 0.02


def simplify_polygon(contour: Sequence[Point], epsilon_ratio: float = DEFAULT_EPSILON_RATIO) -> Polygon:
    """
    Douglas-Peucker line simplification.

    The tolerance is epsilon_ratio times the open path length of the whole input
    contour and stays fixed for every sub-span. A span whose farthest interior
    point lies within tolerance of the line through its endpoints collapses to
    those endpoints; otherwise it splits at that point. Spans are processed from
    an explicit work list, so contour length never turns into call depth.

    Inputs with fewer than 3 points come back unchanged.
    """
    pts: List[Point] = list(contour)
    n = len(pts)
    if n < 3:
        return pts

    tolerance = epsilon_ratio * path_length(pts)
    keep = [False] * n
    keep[0] = keep[-1] = True

    work: List[Tuple[int, int]] = [(0, n - 1)]
    while work:
        first, last = work.pop()
        if last - first < 2:
            continue
        start, end = pts[first], pts[last]
        best, split = -1.0, first
        for i in range(first + 1, last):
            d = point_line_distance(pts[i], start, end)
            if d > best:
                best, split = d, i
        if best > tolerance:
            keep[split] = True
            work.append((split, last))
            work.append((first, split))

    return [p for p, k in zip(pts, keep) if k]


def drop_closing_vertex(polygon: Sequence[Point], tolerance: float) -> Polygon:
    """
    A walk around a closed outline ends next to where it started, which leaves
    the simplified polygon with a trailing copy of its first vertex. Drop it when
    it lies within tolerance of the first vertex; triangles and shorter are kept.
    """
    poly = list(polygon)
    if len(poly) > 3 and distance(poly[0], poly[-1]) <= tolerance:
        return poly[:-1]
    return poly
