# どこで: `src/shadowquad/core/shadow_shape.py`。
# 何を: シルエット辺を光源と反対方向へ押し出し、影の四角形（ワールド座標 4 点）を作る。
# なぜ: 影の形状を描画側（頂点バッファ/SVG）から独立した純粋関数として扱うため。

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from shadowquad.core.errors import DegenerateGeometryError

# 影の押し出し長（ワールド単位）。
SHADOW_SIZE = 20.0


def _unit_direction(world_point: np.ndarray, light: np.ndarray) -> np.ndarray:
    """光源から world_point への単位ベクトルを返す。"""
    if not (np.all(np.isfinite(world_point)) and np.all(np.isfinite(light))):
        raise DegenerateGeometryError(
            f"座標が有限でない: point={world_point.tolist()} light={light.tolist()}"
        )
    direction = (world_point - light).astype(np.float64)
    norm = float(np.hypot(direction[0], direction[1]))
    if norm == 0.0:
        raise DegenerateGeometryError(
            f"光源が影の端点と一致している: point={world_point.tolist()}"
        )
    return direction / norm


def build_shadow_shape(
    edge: tuple[Sequence[float], Sequence[float]],
    light: Sequence[float],
    position: Sequence[float],
    extrusion_length: float = SHADOW_SIZE,
) -> np.ndarray:
    """シルエット辺から影の四角形を構築する。

    Parameters
    ----------
    edge : tuple[array-like, array-like]
        シルエット辺の 2 端点（多角形ローカル座標）。
    light : array-like
        光源位置（ワールド座標）。
    position : array-like
        多角形のワールド配置オフセット。
    extrusion_length : float, optional
        押し出し長。有限の非負値。

    Returns
    -------
    np.ndarray
        float32 型 shape (4, 2)。順序は
        `[extruded0, endpoint0, endpoint1, extruded1]`（ワールド座標）。
        下流の三角形分割 `[0, 1, 2, 3, 2, 0]` がこの巡回順を前提にする。

    Raises
    ------
    DegenerateGeometryError
        光源が端点のワールド位置と一致し、押し出し方向が定まらない場合。
        光源や配置に NaN/inf が含まれ、押し出し方向が有限でない場合も送出する。
    ValueError
        extrusion_length が負または非有限の場合。
    """
    length = float(extrusion_length)
    if not math.isfinite(length) or length < 0.0:
        raise ValueError(
            f"extrusion_length は有限の非負値である必要がある: got={extrusion_length!r}"
        )

    offset = np.asarray(position, dtype=np.float32).reshape(2)
    light_xy = np.asarray(light, dtype=np.float32).reshape(2)
    p0 = offset + np.asarray(edge[0], dtype=np.float32).reshape(2)
    p1 = offset + np.asarray(edge[1], dtype=np.float32).reshape(2)

    dir0 = _unit_direction(p0, light_xy)
    dir1 = _unit_direction(p1, light_xy)

    shape = np.empty((4, 2), dtype=np.float32)
    shape[0] = p0 + dir0 * length
    shape[1] = p0
    shape[2] = p1
    shape[3] = p1 + dir1 * length
    return shape


__all__ = ["SHADOW_SIZE", "build_shadow_shape"]
