"""
Core contracts and simple data types shared across stages.
"""

from __future__ import annotations
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, List, Mapping, Tuple
import math

from rectscan.core.errors import InvalidParameters

# Integer (x, y) pixel coordinate.
Point = Tuple[int, int]
# Ordered points from one flood walk over the edge mask.
Contour = List[Point]
# Simplified vertex list; closure between last and first is implied, never stored.
Polygon = List[Point]

# Inclusive domain of each caller-supplied parameter, keyed by contract name.
PARAM_LIMITS: Dict[str, Tuple[float, float]] = {
    "edgeSensitivity": (10, 300),
    "minArea": (100, 50000),
    "maxAspectRatio": (1, 20),
}

# Whole-number fields; integral floats such as 60.0 are accepted.
_INTEGER_FIELDS = ("edgeSensitivity", "minArea")

_FIELD_ALIASES = {
    "edgeSensitivity": ("edgeSensitivity", "edge_sensitivity", "sensitivity"),
    "minArea": ("minArea", "min_area"),
    "maxAspectRatio": ("maxAspectRatio", "max_aspect_ratio", "aspectRatio"),
}


@dataclass(frozen=True)
class RectangleCandidate:
    """
    Axis-aligned box in source-image pixels, scored by how well the polygon
    it came from fits its own bounding box.
    """
    x: int
    y: int
    width: int
    height: int
    confidence: float

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class Detection:
    """
    Final output unit: a surviving candidate with a stable id, rounded aspect
    ratio and integer center. Built once after overlap resolution.
    """
    id: str
    x: int
    y: int
    width: int
    height: int
    area: int
    aspect_ratio: float
    confidence: float
    center: Point

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "area": self.area,
            "aspectRatio": self.aspect_ratio,
            "confidence": self.confidence,
            "center": {"x": self.center[0], "y": self.center[1]},
        }


@dataclass(frozen=True)
class DetectionParameters:
    """
    Caller-supplied tuning.

    edge_sensitivity: gradient-magnitude threshold, lower finds weaker edges
    min_area:         smallest accepted bounding-box area in pixels
    max_aspect_ratio: largest accepted long-side / short-side ratio
    """
    edge_sensitivity: float
    min_area: float
    max_aspect_ratio: float

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DetectionParameters":
        """Build from contract keys (edgeSensitivity, ...) or snake_case keys."""
        values = {}
        missing = {}
        for field, aliases in _FIELD_ALIASES.items():
            for key in aliases:
                if key in data:
                    values[field] = data[key]
                    break
            else:
                missing[field] = "is required"
        if missing:
            raise InvalidParameters(missing)
        return cls(
            edge_sensitivity=values["edgeSensitivity"],
            min_area=values["minArea"],
            max_aspect_ratio=values["maxAspectRatio"],
        )

    def as_dict(self) -> Dict[str, float]:
        return {
            "edgeSensitivity": self.edge_sensitivity,
            "minArea": self.min_area,
            "maxAspectRatio": self.max_aspect_ratio,
        }

    def problems(self) -> Dict[str, str]:
        """Return {field: reason} for every value outside its domain."""
        out: Dict[str, str] = {}
        for field, value in self.as_dict().items():
            lo, hi = PARAM_LIMITS[field]
            if isinstance(value, bool) or not isinstance(value, Real):
                out[field] = f"must be a number, got {value!r}"
            elif not math.isfinite(float(value)):
                out[field] = f"must be finite, got {value!r}"
            elif field in _INTEGER_FIELDS and float(value) != math.floor(float(value)):
                out[field] = f"must be a whole number, got {value}"
            elif not (lo <= value <= hi):
                out[field] = f"must be within [{lo}, {hi}], got {value}"
        return out

    def validate(self) -> None:
        reasons = self.problems()
        if reasons:
            raise InvalidParameters(reasons)
