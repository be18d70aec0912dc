# rectscan/geometry/validate.py
from __future__ import annotations
from typing import Optional, Sequence
import logging
import math

from rectscan.core.contracts import Point, RectangleCandidate
from rectscan.geometry.primitives import bounding_box, distance, is_valid_box

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.3
# corner-fit tolerance is this fraction of sqrt(bounding-box area)
CORNER_TOLERANCE_SCALE = 0.1


def corner_fit_distance(polygon: Sequence[Point]) -> float:
    """Mean distance from each vertex to its nearest bounding-box corner."""
    x0, y0, x1, y1 = bounding_box(polygon)
    corners = ((x0, y0), (x1, y0), (x1, y1), (x0, y1))
    return sum(min(distance(p, c) for c in corners) for p in polygon) / len(polygon)


def validate_rectangle(polygon: Sequence[Point],
                       min_area: float,
                       max_aspect_ratio: float) -> Optional[RectangleCandidate]:
    """
    Turn a 4-vertex polygon into a scored candidate, or None.

    The candidate is the polygon's axis-aligned bounding box. It is accepted when
    the box passes the area / aspect gates and the vertices sit, on average,
    closer to the box corners than sqrt(area) * 0.1. Confidence falls linearly
    with that average distance and is floored at 0.3.
    """
    if len(polygon) != 4:
        return None

    x0, y0, x1, y1 = bounding_box(polygon)
    width, height = x1 - x0, y1 - y0
    if not is_valid_box(width, height, min_area, max_aspect_ratio):
        return None

    area = width * height
    avg = corner_fit_distance(polygon)
    tolerance = math.sqrt(area) * CORNER_TOLERANCE_SCALE
    if not avg < tolerance:
        logger.debug("[validate] corner fit %.2f >= %.2f for box %dx%d at (%d,%d)",
                     avg, tolerance, width, height, x0, y0)
        return None

    confidence = min(1.0, max(MIN_CONFIDENCE, 1.0 - avg / tolerance))
    return RectangleCandidate(x=int(x0), y=int(y0), width=int(width), height=int(height),
                              confidence=confidence)
