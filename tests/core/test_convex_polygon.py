"""core.convex_polygon（円内サンプルの凸包生成）のテスト。"""

from __future__ import annotations

import numpy as np
import pytest

from shadowquad.core.convex_polygon import (
    ConvexPolygon,
    convex_hull,
    generate_convex_polygon,
    is_convex,
    sample_disk_points,
)


@pytest.mark.parametrize("seed", range(50))
def test_generated_polygon_is_convex(seed: int) -> None:
    polygon = generate_convex_polygon(10, 1.0, seed=seed)
    assert polygon.vertex_count >= 3
    assert polygon.is_convex()
    # 全頂点が凸包上にある（内点を含まない）
    assert convex_hull(polygon.coords).shape[0] == polygon.vertex_count


@pytest.mark.parametrize("seed", range(10))
def test_generated_polygon_has_no_adjacent_duplicates(seed: int) -> None:
    coords = generate_convex_polygon(30, 0.3, seed=seed).coords
    rolled = np.roll(coords, 1, axis=0)
    assert np.all(np.any(coords != rolled, axis=1))


def test_generated_polygon_is_inside_disk() -> None:
    radius = 0.3
    polygon = generate_convex_polygon(50, radius, seed=1)
    norms = np.hypot(polygon.coords[:, 0], polygon.coords[:, 1])
    assert np.all(norms <= radius + 1e-6)


def test_generated_polygon_is_reproducible_by_seed() -> None:
    a = generate_convex_polygon(10, 1.0, seed=123)
    b = generate_convex_polygon(10, 1.0, seed=123)
    np.testing.assert_array_equal(a.coords, b.coords)


def test_generated_polygon_winding_is_counter_clockwise() -> None:
    coords = generate_convex_polygon(20, 1.0, seed=7).coords.astype(np.float64)
    x = coords[:, 0]
    y = coords[:, 1]
    signed_area = 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))
    assert signed_area > 0.0


@pytest.mark.parametrize("n", [0, 1, 2])
def test_too_few_samples_return_degenerate_polygon(n: int) -> None:
    polygon = generate_convex_polygon(n, 1.0, seed=0)
    assert polygon.coords.shape == (n, 2)
    assert polygon.is_degenerate
    assert not polygon.is_convex()


def test_zero_radius_collapses_to_single_point() -> None:
    polygon = generate_convex_polygon(10, 0.0, seed=0)
    assert polygon.coords.shape == (1, 2)


def test_negative_radius_raises() -> None:
    with pytest.raises(ValueError):
        generate_convex_polygon(10, -1.0)


def test_disk_sampling_keeps_uniform_x_bias() -> None:
    """x が一様に取られる（面積一様サンプルより端寄りの密度になる）。"""
    rng = np.random.default_rng(0)
    radius = 2.0
    points = sample_disk_points(20000, radius, rng=rng)
    assert points.dtype == np.float32
    norms = np.hypot(points[:, 0].astype(np.float64), points[:, 1].astype(np.float64))
    assert np.all(norms <= radius + 1e-5)
    # x 一様なら |x| > r/2 の割合は 0.5（面積一様なら約 0.39）
    outer = float(np.mean(np.abs(points[:, 0]) > radius / 2.0))
    assert 0.47 < outer < 0.53


def test_is_convex_rejects_concave_polygon() -> None:
    concave = np.array([[0.0, 0.0], [2.0, 0.0], [1.0, 0.5], [2.0, 2.0], [0.0, 2.0]])
    assert not is_convex(concave)


def test_is_convex_accepts_clockwise_square() -> None:
    square_cw = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0]])
    assert is_convex(square_cw)


def test_convex_polygon_is_read_only_float32() -> None:
    polygon = ConvexPolygon(coords=[[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    assert polygon.coords.dtype == np.float32
    assert not polygon.coords.flags.writeable
    np.testing.assert_allclose(
        polygon.world_coords((1.0, 2.0)),
        [[1.0, 2.0], [2.0, 2.0], [1.0, 3.0]],
    )


def test_convex_polygon_rejects_bad_shape() -> None:
    with pytest.raises(ValueError):
        ConvexPolygon(coords=np.zeros((3, 3), dtype=np.float32))
