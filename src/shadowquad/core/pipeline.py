# src/shadowquad/core/pipeline.py
# 1 フレーム分の影計算パイプライン（シルエット辺 → 影四角形 → 斉次 UV）。

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from shadowquad.core.convex_polygon import ConvexPolygon
from shadowquad.core.errors import DegenerateGeometryError
from shadowquad.core.projective_texture import projective_texture_coords
from shadowquad.core.scene import Scene
from shadowquad.core.shadow_shape import SHADOW_SIZE, build_shadow_shape
from shadowquad.core.silhouette import find_silhouette_edge

_logger = logging.getLogger(__name__)

# 影四角形の各頂点に割り当てる基底 UV。u=0.5 が影の中心線、u=0/1 が影の縁になる。
SHADOW_UV = np.array(
    [[1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [0.0, 0.0]],
    dtype=np.float32,
)
SHADOW_UV.setflags(write=False)


@dataclass(frozen=True, slots=True)
class ShadowFrame:
    """1 多角形・1 フレーム分の影計算結果。"""

    index: int
    edge: tuple[np.ndarray, np.ndarray]
    shape: np.ndarray  # (4, 2) float32, ワールド座標
    uvq: np.ndarray  # (4, 3) float32


def compute_shadow_frame(
    polygon: ConvexPolygon,
    position: Sequence[float] | np.ndarray,
    light: Sequence[float] | np.ndarray,
    *,
    extrusion_length: float = SHADOW_SIZE,
    uv: np.ndarray = SHADOW_UV,
    index: int = 0,
) -> ShadowFrame:
    """1 つの多角形について影を計算する。

    Raises
    ------
    DegenerateGeometryError
        多角形が退化している、または光源が影の端点と一致する場合。
    """
    edge = find_silhouette_edge(polygon, position, light)
    shape = build_shadow_shape(edge, light, position, extrusion_length)
    uvq = projective_texture_coords(shape, uv)
    return ShadowFrame(index=int(index), edge=edge, shape=shape, uvq=uvq)


def compute_scene_shadows(
    scene: Scene,
    light: Sequence[float] | np.ndarray,
    *,
    extrusion_length: float = SHADOW_SIZE,
    uv: np.ndarray = SHADOW_UV,
) -> list[ShadowFrame]:
    """シーン内の全多角形について影を計算する。

    退化した影はそのフレームだけ描画対象から外す（例外は外へ出さない）。
    戻り値は多角形の並び順を保つ。
    """
    frames: list[ShadowFrame] = []
    for i, (polygon, position) in enumerate(zip(scene.polygons, scene.positions)):
        try:
            frame = compute_shadow_frame(
                polygon,
                position,
                light,
                extrusion_length=extrusion_length,
                uv=uv,
                index=i,
            )
        except DegenerateGeometryError as exc:
            _logger.debug("影をスキップします: polygon=%d reason=%s", i, exc)
            continue
        frames.append(frame)
    return frames


__all__ = ["SHADOW_UV", "ShadowFrame", "compute_scene_shadows", "compute_shadow_frame"]
