# rectscan/geometry/detect.py
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from pathlib import Path
import copy
import logging
import time

import numpy as np
import yaml

from rectscan.core.contracts import Contour, Detection, DetectionParameters, RectangleCandidate
from rectscan.core.errors import InvalidParameters, ProcessingFailure, RectScanError
from rectscan.geometry.overlap import resolve_overlaps
from rectscan.geometry.primitives import path_length, round_half_up
from rectscan.geometry.simplify import drop_closing_vertex, simplify_polygon
from rectscan.geometry.trace import trace_contours
from rectscan.geometry.validate import validate_rectangle
from rectscan.imaging.filters import extract_edges, gaussian_blur, to_grayscale

logger = logging.getLogger(__name__)

_DEFAULT_CFG: Dict = {
    "blur_radius": 1,
    "edge_method": "central",        # or "sobel"
    "min_contour_len": 10,
    "max_contour_len": 1000,         # hard cap per flood walk
    "epsilon_ratio": 0.02,           # Douglas-Peucker tolerance / contour length
    "close_contours": True,          # drop trailing vertex that returns to the start
    "overlap_threshold": 0.3,
    "max_results": 10,
    # caller-facing defaults, only read by tools
    "params": {"edgeSensitivity": 60, "minArea": 1500, "maxAspectRatio": 4.0},
}

ParamsLike = Union[DetectionParameters, Mapping[str, Any]]


# ----------------------------------------------------------------------------- #
# Config / utilities                                                            #
# ----------------------------------------------------------------------------- #

def _merge_cfg(cfg: Optional[Dict]) -> Dict:
    merged = copy.deepcopy(_DEFAULT_CFG)
    if not cfg:
        return merged
    for k, v in cfg.items():
        if isinstance(v, dict) and k in merged and isinstance(merged[k], dict):
            merged[k] = {**merged[k], **v}
        else:
            merged[k] = v
    return merged


def load_cfg(path: Optional[Union[str, Path]] = None) -> Dict:
    """Read a YAML detector config and merge it over the defaults (defaults only if path is None)."""
    if path is None:
        return _merge_cfg(None)
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config {path} must be a mapping, got {type(data).__name__}")
    return _merge_cfg(data)


def _coerce_params(params: ParamsLike) -> DetectionParameters:
    if isinstance(params, DetectionParameters):
        return params
    if isinstance(params, Mapping):
        return DetectionParameters.from_mapping(params)
    raise InvalidParameters({"params": f"expected DetectionParameters or a mapping, got {type(params).__name__}"})


def _check_dims(width: Any, height: Any) -> None:
    for name, v in (("width", width), ("height", height)):
        if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
            raise ValueError(f"{name} must be an integer, got {v!r}")
        if v < 0:
            raise ValueError(f"{name} must be >= 0, got {v}")


def _coerce_pixels(pixels: Any, width: int, height: int) -> np.ndarray:
    """RGBA samples (flat or (H, W, 4)) -> (H, W, 4) uint8 view/copy."""
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    else:
        arr = np.asarray(pixels)
        if arr.dtype != np.uint8:
            if arr.size and (arr.min() < 0 or arr.max() > 255):
                raise ValueError("pixel samples must be within [0, 255]")
            arr = arr.astype(np.uint8)
    expected = width * height * 4
    if arr.size != expected:
        raise ValueError(f"buffer holds {arr.size} samples, expected {expected} "
                         f"for {width}x{height} RGBA")
    return arr.reshape(height, width, 4)


# ----------------------------------------------------------------------------- #
# Contours -> candidates -> detections                                           #
# ----------------------------------------------------------------------------- #

def find_candidates(contours: Sequence[Contour], params: DetectionParameters, cfg: Dict) -> List[RectangleCandidate]:
    eps_ratio = float(cfg["epsilon_ratio"])
    out: List[RectangleCandidate] = []
    for contour in contours:
        poly = simplify_polygon(contour, eps_ratio)
        if cfg.get("close_contours", True):
            poly = drop_closing_vertex(poly, eps_ratio * path_length(contour))
        cand = validate_rectangle(poly, params.min_area, params.max_aspect_ratio)
        if cand is not None:
            logger.debug("[candidates] %d pts -> %d vertices -> box %dx%d at (%d,%d) conf=%.3f",
                         len(contour), len(poly), cand.width, cand.height, cand.x, cand.y, cand.confidence)
            out.append(cand)
    return out


def make_detections(candidates: Sequence[RectangleCandidate]) -> List[Detection]:
    """Number candidates RECT-1.. in the given order and derive aspect ratio / center."""
    detections = []
    for i, c in enumerate(candidates):
        detections.append(Detection(
            id=f"RECT-{i + 1}",
            x=c.x,
            y=c.y,
            width=c.width,
            height=c.height,
            area=c.area,
            aspect_ratio=round_half_up(c.width / c.height * 100) / 100.0,
            confidence=c.confidence,
            center=(round_half_up(c.x + c.width / 2), round_half_up(c.y + c.height / 2)),
        ))
    return detections


# ----------------------------------------------------------------------------- #
# Public entrypoint                                                              #
# ----------------------------------------------------------------------------- #

def detect(pixels: Any, width: int, height: int, params: ParamsLike,
           cfg: Optional[Dict] = None) -> List[Detection]:
    """
    Locate axis-aligned rectangles in an RGBA buffer.

    Returns at most cfg["max_results"] detections, best first. Parameters are
    validated before any buffer is touched (InvalidParameters); a zero-area image
    yields []; any fault inside a stage surfaces as ProcessingFailure.
    """
    params = _coerce_params(params)
    params.validate()
    cfg = _merge_cfg(cfg)

    try:
        _check_dims(width, height)
    except ValueError as exc:
        raise ProcessingFailure(str(exc)) from exc
    if width == 0 or height == 0:
        logger.debug("[detect] empty image %sx%s, nothing to do", width, height)
        return []

    t0 = time.perf_counter()
    try:
        rgba = _coerce_pixels(pixels, int(width), int(height))
        gray = to_grayscale(rgba)
        blurred = gaussian_blur(gray, int(cfg["blur_radius"]))
        edges = extract_edges(blurred, params.edge_sensitivity, cfg["edge_method"])
        contours = trace_contours(edges, int(cfg["min_contour_len"]), int(cfg["max_contour_len"]))
        candidates = find_candidates(contours, params, cfg)
        kept = resolve_overlaps(candidates, float(cfg["overlap_threshold"]))
    except RectScanError:
        raise
    except Exception as exc:
        logger.error("[detect] pipeline failed on %sx%s image: %s", width, height, exc)
        raise ProcessingFailure(f"detection failed: {exc}") from exc

    detections = make_detections(kept[:int(cfg["max_results"])])
    logger.info("[detect] %dx%d: %d contours, %d candidates, %d detections in %.1f ms",
                width, height, len(contours), len(candidates), len(detections),
                (time.perf_counter() - t0) * 1000.0)
    return detections


def detect_in_image(rgba: np.ndarray, params: ParamsLike, cfg: Optional[Dict] = None) -> List[Detection]:
    """
    Run detect() on an (H, W, 4) array and apply the caller contract for
    ProcessingFailure: log it and report zero detections.
    InvalidParameters still propagates.
    """
    rgba = np.asarray(rgba)
    if rgba.ndim != 3:
        logger.warning("[detect] expected (H, W, 4) image, got shape %s", rgba.shape)
        return []
    H, W = rgba.shape[:2]
    try:
        return detect(rgba, W, H, params, cfg)
    except ProcessingFailure as exc:
        logger.warning("[detect] %s; treating as no detections", exc)
        return []
