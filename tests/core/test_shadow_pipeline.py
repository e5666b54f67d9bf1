"""core.scene / core.pipeline（シーン生成と 1 フレーム分の影計算）のテスト。"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from shadowquad.core.convex_polygon import ConvexPolygon
from shadowquad.core.errors import DegenerateGeometryError
from shadowquad.core.pipeline import (
    SHADOW_UV,
    compute_scene_shadows,
    compute_shadow_frame,
)
from shadowquad.core.projective_texture import resolve_uv
from shadowquad.core.scene import Scene, create_scene, row_positions


def test_row_positions_match_layout_formula() -> None:
    positions = row_positions(4)
    np.testing.assert_allclose(positions[:, 0], [-1.0, 0.0, 1.0, 2.0])
    np.testing.assert_array_equal(positions[:, 1], np.zeros(4, dtype=np.float32))
    assert row_positions(0).shape == (0, 2)


def test_create_scene_is_reproducible() -> None:
    a = create_scene(4, 10, 0.3, seed=5)
    b = create_scene(4, 10, 0.3, seed=5)
    assert len(a) == 4
    for pa, pb in zip(a.polygons, b.polygons):
        np.testing.assert_array_equal(pa.coords, pb.coords)
    # 1 つの乱数列から順に作るので、多角形同士は異なる
    assert not np.array_equal(a.polygons[0].coords, a.polygons[1].coords)


def test_create_scene_rejects_negative_count() -> None:
    with pytest.raises(ValueError):
        create_scene(-1)


def test_scene_requires_matching_positions() -> None:
    triangle = ConvexPolygon(coords=[[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    with pytest.raises(ValueError):
        Scene(polygons=(triangle,), positions=np.zeros((2, 2)))


def test_compute_shadow_frame_chains_kernel_steps() -> None:
    diamond = ConvexPolygon(coords=[[0.1, 0.0], [0.0, 0.1], [-0.1, 0.0], [0.0, -0.1]])
    frame = compute_shadow_frame(diamond, (0.0, 1.0), (0.0, 0.0), extrusion_length=5.0, index=3)

    assert frame.index == 3
    np.testing.assert_allclose(frame.edge[0], [0.1, 0.0])
    np.testing.assert_allclose(frame.edge[1], [-0.1, 0.0])
    np.testing.assert_allclose(frame.shape[1], [0.1, 1.0])
    np.testing.assert_allclose(frame.shape[2], [-0.1, 1.0])
    assert frame.uvq.shape == (4, 3)
    np.testing.assert_allclose(resolve_uv(frame.uvq), SHADOW_UV, atol=1e-5)


def test_compute_shadow_frame_raises_when_light_on_vertex() -> None:
    triangle = ConvexPolygon(coords=[[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    with pytest.raises(DegenerateGeometryError):
        compute_shadow_frame(triangle, (0.0, 0.0), (0.0, 0.0))


def test_scene_shadows_for_every_polygon() -> None:
    scene = create_scene(4, 10, 0.3, seed=0)
    frames = compute_scene_shadows(scene, (0.5, 3.0), extrusion_length=2.0)
    assert [f.index for f in frames] == [0, 1, 2, 3]
    for frame in frames:
        assert frame.shape.dtype == np.float32
        assert np.all(np.isfinite(frame.uvq))


def test_scene_shadows_skip_degenerate_polygon(caplog: pytest.LogCaptureFixture) -> None:
    triangle = ConvexPolygon(coords=[[0.0, 0.0], [0.2, 0.0], [0.0, 0.2]])
    point = ConvexPolygon(coords=[[0.0, 0.0]])
    scene = Scene(
        polygons=(triangle, point, triangle),
        positions=[[-1.0, 0.0], [0.0, 0.0], [1.0, 0.0]],
    )

    with caplog.at_level(logging.DEBUG, logger="shadowquad.core.pipeline"):
        frames = compute_scene_shadows(scene, (0.0, 2.0))

    assert [f.index for f in frames] == [0, 2]
    assert any("polygon=1" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize("light", [(float("nan"), 0.0), (float("-inf"), 1.0)])
def test_scene_shadows_never_carry_non_finite_quads(light) -> None:
    scene = create_scene(2, 10, 0.3, seed=3)
    frames = compute_scene_shadows(scene, light)
    assert frames == []
