"""core.lines（陰関数直線と交点計算）のテスト。"""

from __future__ import annotations

import numpy as np

from shadowquad.core.lines import EPS, ImplicitLine, det, intersect


def test_from_segment_coefficients() -> None:
    line = ImplicitLine.from_segment((1.0, 2.0), (3.0, 5.0))
    assert (line.a, line.b, line.c) == (-3.0, 2.0, -1.0)
    # 両端点とも直線上にある
    for x, y in ((1.0, 2.0), (3.0, 5.0)):
        assert line.a * x + line.b * y + line.c == 0.0


def test_from_segment_same_point_is_degenerate() -> None:
    line = ImplicitLine.from_segment((2.0, 2.0), (2.0, 2.0))
    assert line.a == 0.0
    assert line.b == 0.0


def test_det() -> None:
    assert det(1.0, 2.0, 3.0, 4.0) == -2.0


def test_horizontal_and_vertical_intersect_at_origin() -> None:
    horizontal = ImplicitLine.from_segment((0.0, 0.0), (1.0, 0.0))
    vertical = ImplicitLine.from_segment((0.0, 0.0), (0.0, 1.0))
    point = intersect(horizontal, vertical)
    assert point is not None
    assert point.dtype == np.float32
    np.testing.assert_array_equal(point, [0.0, 0.0])


def test_diagonals_of_unit_square_intersect_at_center() -> None:
    d1 = ImplicitLine.from_segment((0.0, 0.0), (1.0, 1.0))
    d2 = ImplicitLine.from_segment((0.0, 1.0), (1.0, 0.0))
    point = intersect(d1, d2)
    assert point is not None
    np.testing.assert_allclose(point, [0.5, 0.5], rtol=0.0, atol=1e-7)


def test_parallel_lines_have_no_intersection() -> None:
    h1 = ImplicitLine.from_segment((0.0, 0.0), (1.0, 0.0))
    h2 = ImplicitLine.from_segment((0.0, 1.0), (1.0, 1.0))
    assert intersect(h1, h2) is None


def test_equal_lines_have_no_intersection() -> None:
    h1 = ImplicitLine.from_segment((0.0, 0.0), (1.0, 0.0))
    h2 = ImplicitLine.from_segment((0.0, 0.0), (1.0, 0.0))
    assert intersect(h1, h2) is None


def test_nearly_parallel_below_eps_has_no_intersection() -> None:
    l1 = ImplicitLine(a=EPS / 4.0, b=1.0, c=0.0)
    l2 = ImplicitLine(a=0.0, b=1.0, c=-1.0)
    assert intersect(l1, l2) is None
