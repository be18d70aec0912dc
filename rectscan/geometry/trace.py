# rectscan/geometry/trace.py
"""
Contour tracing over a binary edge mask.

Single-pass connected-component labeling restricted to edge pixels: every
unvisited edge pixel found in raster order seeds an iterative depth-first walk
over its 8-neighborhood. A pixel is marked and appended to the contour at the
moment it is discovered, so a walk along a thick edge band advances both rows
together instead of leaving one behind on the stack.

Contours are not guaranteed closed or one pixel wide; a dense edge blob
becomes one large contour.
"""

from __future__ import annotations
import logging
from typing import List

import numpy as np

from rectscan.core.contracts import Contour

logger = logging.getLogger(__name__)

MIN_CONTOUR_LEN = 10
MAX_CONTOUR_LEN = 1000

# (dx, dy) in raster order; the walk continues from the last one pushed.
NEIGHBOR_OFFSETS = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)


def _walk(seed: int, on: bytes, visited: bytearray, width: int, max_len: int) -> Contour:
    offsets = [dy * width + dx for dx, dy in NEIGHBOR_OFFSETS]
    visited[seed] = 1
    contour: Contour = [(seed % width, seed // width)]
    # points are appended as they are discovered, so contour[1] is the seed's first
    # raster neighbour rather than the next pixel popped off the stack
    stack = [seed]
    while stack and len(contour) < max_len:
        idx = stack.pop()
        for off in offsets:
            n = idx + off
            if on[n] and not visited[n]:
                visited[n] = 1
                contour.append((n % width, n // width))
                if len(contour) >= max_len:
                    break
                stack.append(n)
    return contour


def trace_contours(edges: np.ndarray,
                   min_len: int = MIN_CONTOUR_LEN,
                   max_len: int = MAX_CONTOUR_LEN) -> List[Contour]:
    """
    Return contours in discovery order (raster order of each seed pixel).
    Walks stop at max_len points; contours shorter than min_len are dropped
    but their pixels stay visited.
    """
    edges = np.asarray(edges)
    H, W = edges.shape[:2]
    if H < 3 or W < 3:
        return []

    mask = edges != 0
    # only the interior is scanned; keeps every neighbor offset inside the buffer
    mask[0, :] = False
    mask[-1, :] = False
    mask[:, 0] = False
    mask[:, -1] = False

    on = mask.ravel().tobytes()
    visited = bytearray(H * W)
    contours: List[Contour] = []
    dropped = 0
    capped = 0

    for seed in np.flatnonzero(mask):
        seed = int(seed)
        if visited[seed]:
            continue
        contour = _walk(seed, on, visited, W, max_len)
        if len(contour) >= max_len:
            capped += 1
        if len(contour) < min_len:
            dropped += 1
            continue
        contours.append(contour)

    logger.debug("[trace] contours=%d dropped_short=%d capped=%d", len(contours), dropped, capped)
    return contours
