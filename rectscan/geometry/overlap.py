# rectscan/geometry/overlap.py
from __future__ import annotations
from typing import Iterable, List

from rectscan.core.contracts import RectangleCandidate
from rectscan.geometry.primitives import overlap_ratio

DEFAULT_OVERLAP_THRESHOLD = 0.3


def resolve_overlaps(candidates: Iterable[RectangleCandidate],
                     threshold: float = DEFAULT_OVERLAP_THRESHOLD) -> List[RectangleCandidate]:
    """
    Greedy suppression, highest confidence first (stable for ties).

    A candidate is kept unless its overlap ratio with some already-kept one
    exceeds threshold. Survivors come back in acceptance order; truncation is
    left to the caller. The input is not reordered in place.
    """
    kept: List[RectangleCandidate] = []
    for cand in sorted(candidates, key=lambda c: c.confidence, reverse=True):
        if any(overlap_ratio(cand, other) > threshold for other in kept):
            continue
        kept.append(cand)
    return kept
