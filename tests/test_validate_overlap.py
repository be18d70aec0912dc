"""
Rectangle validator, overlap resolver and the geometry helpers they share.
"""
from __future__ import annotations

import pytest

from rectscan.core.contracts import RectangleCandidate
from rectscan.geometry.overlap import resolve_overlaps
from rectscan.geometry.primitives import (
    bounding_box,
    is_valid_box,
    overlap_ratio,
    path_length,
    point_line_distance,
    round_half_up,
)
from rectscan.geometry.validate import validate_rectangle

# ---------- primitives ---------- #

def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-0.5) == 0
    assert round_half_up(1.49) == 1


def test_point_line_distance():
    assert point_line_distance((5, 3), (0, 0), (10, 0)) == pytest.approx(3.0)
    # measured to the infinite line, not the segment
    assert point_line_distance((20, 3), (0, 0), (10, 0)) == pytest.approx(3.0)
    assert point_line_distance((3, 4), (0, 0), (0, 0)) == pytest.approx(5.0)


def test_path_length_and_bbox():
    pts = [(0, 0), (3, 4), (3, 10)]
    assert path_length(pts) == pytest.approx(11.0)
    assert bounding_box(pts) == (0, 0, 3, 10)


def test_is_valid_box():
    assert is_valid_box(80, 50, 100, 5)
    assert not is_valid_box(0, 50, 100, 5)
    assert not is_valid_box(9, 9, 100, 5)
    assert not is_valid_box(300, 10, 100, 5)
    assert is_valid_box(50, 10, 100, 5)  # ratio exactly 5


def test_overlap_ratio_uses_smaller_area():
    big = RectangleCandidate(0, 0, 100, 100, 0.9)
    inner = RectangleCandidate(10, 10, 20, 20, 0.5)
    far = RectangleCandidate(200, 200, 10, 10, 0.5)
    touching = RectangleCandidate(100, 0, 10, 10, 0.5)
    assert overlap_ratio(big, inner) == pytest.approx(1.0)
    assert overlap_ratio(inner, big) == pytest.approx(1.0)
    assert overlap_ratio(big, far) == 0.0
    assert overlap_ratio(big, touching) == 0.0

# ---------- validator ---------- #

def test_rejects_non_quadrilaterals():
    tri = [(0, 0), (100, 0), (0, 50)]
    pent = [(0, 0), (100, 0), (100, 50), (50, 60), (0, 50)]
    assert validate_rectangle(tri, 100, 5) is None
    assert validate_rectangle(pent, 100, 5) is None
    assert validate_rectangle([], 100, 5) is None


def test_perfect_rectangle_full_confidence():
    cand = validate_rectangle([(10, 20), (110, 20), (110, 70), (10, 70)], 100, 5)
    assert cand == RectangleCandidate(10, 20, 100, 50, 1.0)
    assert cand.area == 5000


def test_slightly_off_corner_lowers_confidence():
    cand = validate_rectangle([(2, 1), (100, 0), (100, 50), (0, 50)], 100, 5)
    assert cand is not None
    assert (cand.x, cand.y, cand.width, cand.height) == (0, 0, 100, 50)
    assert 0.3 <= cand.confidence < 1.0


def test_diamond_is_rejected():
    assert validate_rectangle([(50, 0), (100, 25), (50, 50), (0, 25)], 100, 5) is None


def test_area_and_aspect_gates():
    assert validate_rectangle([(0, 0), (5, 0), (5, 5), (0, 5)], 100, 5) is None
    assert validate_rectangle([(0, 0), (200, 0), (200, 10), (0, 10)], 100, 5) is None
    assert validate_rectangle([(0, 0), (0, 0), (0, 50), (0, 50)], 1, 20) is None

# ---------- overlap resolver ---------- #

def test_higher_confidence_wins_overlap():
    low = RectangleCandidate(10, 10, 100, 100, 0.6)
    high = RectangleCandidate(0, 0, 100, 100, 0.9)
    kept = resolve_overlaps([low, high])
    assert kept == [high]


def test_small_overlap_keeps_both_in_confidence_order():
    a = RectangleCandidate(0, 0, 100, 100, 0.5)
    b = RectangleCandidate(80, 0, 100, 100, 0.7)  # ratio 0.2
    assert resolve_overlaps([a, b]) == [b, a]


def test_ties_keep_input_order():
    a = RectangleCandidate(0, 0, 10, 10, 0.8)
    b = RectangleCandidate(50, 0, 10, 10, 0.8)
    c = RectangleCandidate(100, 0, 10, 10, 0.8)
    assert resolve_overlaps([a, b, c]) == [a, b, c]


def test_resolver_is_idempotent():
    cands = [
        RectangleCandidate(0, 0, 100, 100, 0.9),
        RectangleCandidate(20, 20, 100, 100, 0.8),
        RectangleCandidate(300, 0, 50, 50, 0.4),
        RectangleCandidate(310, 10, 50, 50, 0.95),
        RectangleCandidate(600, 600, 10, 10, 0.3),
    ]
    once = resolve_overlaps(cands)
    assert resolve_overlaps(once) == once
    assert [c.confidence for c in once] == [0.95, 0.9, 0.3]


def test_resolver_does_not_mutate_input():
    cands = [RectangleCandidate(0, 0, 10, 10, 0.3), RectangleCandidate(50, 0, 10, 10, 0.9)]
    before = list(cands)
    resolve_overlaps(cands)
    assert cands == before
