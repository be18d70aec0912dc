from __future__ import annotations

import numpy as np

from rectscan.geometry.simplify import drop_closing_vertex, simplify_polygon


def test_straight_line_collapses_to_endpoints():
    line = [(x, 3) for x in range(25)]
    assert simplify_polygon(line) == [(0, 3), (24, 3)]


def test_l_shape_keeps_corner():
    pts = [(x, 0) for x in range(11)] + [(10, y) for y in range(1, 11)]
    assert simplify_polygon(pts) == [(0, 0), (10, 0), (10, 10)]


def test_two_points_is_noop():
    assert simplify_polygon([(1, 2), (30, 40)]) == [(1, 2), (30, 40)]
    assert simplify_polygon([(4, 4)]) == [(4, 4)]


def test_vertex_count_never_grows():
    rng = np.random.default_rng(1)
    for _ in range(20):
        n = int(rng.integers(2, 60))
        pts = [tuple(int(v) for v in p) for p in rng.integers(0, 100, size=(n, 2))]
        out = simplify_polygon(pts)
        assert 2 <= len(out) <= len(pts)
        assert out[0] == pts[0] and out[-1] == pts[-1]


def test_zero_ratio_keeps_every_bend():
    pts = [(0, 0), (5, 1), (10, 0), (15, 1)]
    assert simplify_polygon(pts, 0.0) == pts


def test_drop_closing_vertex():
    poly = [(0, 0), (40, 0), (40, 20), (0, 20), (1, 1)]
    assert drop_closing_vertex(poly, 2.0) == [(0, 0), (40, 0), (40, 20), (0, 20)]
    assert drop_closing_vertex(poly, 1.0) == poly
    tri = [(0, 0), (10, 0), (0, 1)]
    assert drop_closing_vertex(tri, 5.0) == tri
