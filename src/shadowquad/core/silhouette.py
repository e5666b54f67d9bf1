"""光源から見た凸多角形の遮蔽辺（シルエット辺）を求める。

- 各頂点へのレイ方向は `position + vertex - light`（ワールド座標）。
- 全順序対 (i, j), i != j を総当たりし、光源から見た最短角度差が最大の対を選ぶ。
- 同じ角度なら走査順で先に見つかった対を残す（厳密な `>` 比較）。

頂点数は高々数十なので O(n^2) の総当たりで十分。凸多角形でのみ正しい。
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit  # type: ignore[import-untyped]

from shadowquad.core.convex_polygon import ConvexPolygon
from shadowquad.core.errors import DegenerateGeometryError


@njit(cache=True)
def _polar_angle(x: float, y: float) -> float:
    p = math.atan2(y, x)
    if p < 0.0:
        return p + 2.0 * math.pi
    return p


@njit(cache=True)
def _shortest_angle(ax: float, ay: float, bx: float, by: float) -> float:
    a = abs(_polar_angle(ax, ay) - _polar_angle(bx, by))
    if a > math.pi:
        return 2.0 * math.pi - a
    return a


@njit(cache=True)
def _max_angle_pair(directions: np.ndarray) -> tuple[int, int]:
    """最短角度差が最大となる頂点対 (i, j) を返す（Numba 実装）。"""
    n = directions.shape[0]
    best_i = 0
    best_j = 1
    max_angle = 0.0
    found = False
    for i in range(n):
        ax = float(directions[i, 0])
        ay = float(directions[i, 1])
        for j in range(n):
            if i == j:
                continue
            cur = _shortest_angle(ax, ay, float(directions[j, 0]), float(directions[j, 1]))
            if cur > max_angle:
                max_angle = cur
                best_i = i
                best_j = j
                found = True
    if not found:
        # 全対の角度が 0（光源と全頂点が一直線）のときは最初の順序対を返す。
        return 0, 1
    return best_i, best_j


def polar_angle(vec: np.ndarray | tuple[float, float]) -> float:
    """+X 軸からの角度 [rad] を [0, 2π) で返す。"""
    return float(_polar_angle(float(vec[0]), float(vec[1])))


def shortest_angle(
    a: np.ndarray | tuple[float, float],
    b: np.ndarray | tuple[float, float],
) -> float:
    """2 つの動径ベクトル間の最短角度 [rad] を [0, π] で返す。"""
    return float(_shortest_angle(float(a[0]), float(a[1]), float(b[0]), float(b[1])))


def find_silhouette_edge(
    polygon: ConvexPolygon,
    position: np.ndarray | tuple[float, float],
    light: np.ndarray | tuple[float, float],
) -> tuple[np.ndarray, np.ndarray]:
    """光源から見たシルエット辺（ローカル座標の頂点対）を返す。

    Parameters
    ----------
    polygon : ConvexPolygon
        対象の凸多角形（ローカル座標）。
    position : array-like
        多角形のワールド配置オフセット (x, y)。
    light : array-like
        光源位置 (x, y)（ワールド座標）。

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        光源から見た角度範囲を挟む 2 頂点（ローカル座標、shape (2,) float32）。

    Raises
    ------
    DegenerateGeometryError
        頂点が 2 未満で辺を作れない場合。

    Notes
    -----
    光源が頂点と一致すると方向ベクトルが長さ 0 になる。ここでは atan2(0, 0) = 0 として
    そのまま扱うため、影の押し出し側（shadow_shape）で検出して弾く。
    """
    coords = polygon.coords
    if coords.shape[0] < 2:
        raise DegenerateGeometryError(
            f"シルエット辺には 2 頂点以上が必要: got={coords.shape[0]}"
        )
    offset = np.asarray(position, dtype=np.float32).reshape(2)
    light_xy = np.asarray(light, dtype=np.float32).reshape(2)

    directions = (offset + coords - light_xy).astype(np.float64)
    i, j = _max_angle_pair(directions)
    return coords[int(i)].copy(), coords[int(j)].copy()


__all__ = ["find_silhouette_edge", "polar_angle", "shortest_angle"]
