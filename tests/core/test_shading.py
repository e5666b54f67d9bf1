"""core.shading（影の縁ぼかしと光源減衰）のテスト。"""

from __future__ import annotations

import numpy as np
import pytest

from shadowquad.core.convex_polygon import ConvexPolygon
from shadowquad.core.pipeline import SHADOW_UV, compute_shadow_frame
from shadowquad.core.projective_texture import projective_texture_coords
from shadowquad.core.shading import (
    light_darkness,
    light_radius,
    shadow_edge_opacity,
    shadow_edge_strips,
    strip_bounds,
)


def _area(quad: np.ndarray) -> float:
    x = quad[:, 0].astype(np.float64)
    y = quad[:, 1].astype(np.float64)
    return 0.5 * abs(float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


def test_edge_opacity_fades_towards_both_edges() -> None:
    u = np.array([0.0, 0.05, 0.1, 0.5, 0.9, 0.95, 1.0])
    np.testing.assert_allclose(
        shadow_edge_opacity(u, 0.1), [0.0, 0.5, 1.0, 1.0, 1.0, 0.5, 0.0], atol=1e-9
    )


def test_edge_opacity_zero_threshold_is_hard_edge() -> None:
    np.testing.assert_array_equal(shadow_edge_opacity([0.0, 0.3, 1.0], 0.0), [1.0, 1.0, 1.0])
    with pytest.raises(ValueError):
        shadow_edge_opacity(0.5, -0.1)


def test_light_darkness_follows_inverse_square() -> None:
    d = np.array([0.0, 0.5, 1.0, 2.0, 4.0])
    np.testing.assert_allclose(light_darkness(d, 1.0), [0.0, 0.0, 0.0, 0.75, 0.9375])
    assert light_radius(4.0) == 2.0


def test_light_darkness_without_light_is_fully_dark() -> None:
    np.testing.assert_array_equal(light_darkness([1.0, 3.0], 0.0), [1.0, 1.0])
    with pytest.raises(ValueError):
        light_darkness(1.0, -1.0)


def test_strip_bounds() -> None:
    np.testing.assert_allclose(strip_bounds(0.1, 2), [0.0, 0.05, 0.1, 0.9, 0.95, 1.0])
    np.testing.assert_array_equal(strip_bounds(0.0, 4), [0.0, 1.0])
    np.testing.assert_allclose(strip_bounds(0.5, 1), [0.0, 0.5, 1.0])


def test_strips_on_rectangular_shadow() -> None:
    # ext0, p0, p1, ext1。u は x=0 で 1、x=1 で 0。
    shape = np.array([[0.0, 2.0], [0.0, 1.0], [1.0, 1.0], [1.0, 2.0]], dtype=np.float32)
    uvq = projective_texture_coords(shape, SHADOW_UV)

    strips = shadow_edge_strips(shape, uvq, th=0.1, steps=2)

    assert [a for _, a in strips] == pytest.approx([0.25, 0.75, 1.0, 0.75, 0.25])
    # u ∈ [0, 0.05] は x ∈ [0.95, 1]
    first, _ = strips[0]
    np.testing.assert_allclose(sorted(set(first[:, 0].round(6))), [0.95, 1.0], atol=1e-6)
    assert sum(_area(q) for q, _ in strips) == pytest.approx(1.0, rel=1e-5)


def test_strips_partition_perspective_shadow() -> None:
    square = ConvexPolygon(coords=[[-0.5, -0.5], [0.5, -0.5], [0.5, 0.5], [-0.5, 0.5]])
    frame = compute_shadow_frame(square, (0.0, 0.0), (0.3, -2.0), extrusion_length=3.0)

    strips = shadow_edge_strips(frame.shape, frame.uvq)

    assert len(strips) == 9
    total = sum(_area(q) for q, _ in strips)
    assert total == pytest.approx(_area(frame.shape), rel=1e-4)
    # 中央の帯は完全に不透明、両端の帯ほど薄い
    alphas = [a for _, a in strips]
    assert alphas[4] == 1.0
    assert alphas[0] < alphas[1] < alphas[2] < alphas[3] < 1.0
