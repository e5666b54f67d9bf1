"""
どこで: `src/shadowquad/core/projective_texture.py`。
何を: 任意の四角形に対する斉次テクスチャ座標 (u*q, v*q, q) を計算する。
なぜ: 四角形を 2 三角形で描くときの継ぎ目（対角線での折れ）を、フラグメント側の q 除算で消すため。

参考: http://reedbeta.com/blog/quadrilateral-interpolation-part-1/
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from shadowquad.core.lines import ImplicitLine, intersect

# 等値線と辺の端点一致を判定するときの許容誤差（u/v 空間）。
_ISO_EPS = 1e-6


def _as_quad(points: Sequence[Sequence[float]] | np.ndarray, *, name: str) -> np.ndarray:
    arr = np.asarray(points, dtype=np.float32)
    if arr.shape != (4, 2):
        raise ValueError(f"{name} は shape (4,2) である必要がある: got={arr.shape}")
    return arr


def projective_texture_coords(
    shape: Sequence[Sequence[float]] | np.ndarray,
    uv: Sequence[Sequence[float]] | np.ndarray,
) -> np.ndarray:
    """四角形 shape の各頂点に斉次テクスチャ座標を割り当てる。

    Parameters
    ----------
    shape : array-like
        四角形の頂点 shape (4, 2)。対角線は shape[0]-shape[2] と shape[1]-shape[3]。
    uv : array-like
        各頂点の基底 UV shape (4, 2)。

    Returns
    -------
    np.ndarray
        float32 型 shape (4, 3)。各行は (q*u, q*v, q)。

    Notes
    -----
    対角線交点 center から頂点 i までの距離 d_i と、対角線上の向かい側の頂点
    p = (i + 2) % 4 までの距離 d_p から `q_i = (d_i + d_p) / d_p` を求める。
    d_p == 0 のときは q_i = 1。
    対角線が平行/一致して交点が無い場合は全頂点 q = 1（アフィン UV のまま）にする。
    """
    quad = _as_quad(shape, name="shape")
    uv_arr = _as_quad(uv, name="uv")

    diagonal1 = ImplicitLine.from_segment(quad[0], quad[2])
    diagonal2 = ImplicitLine.from_segment(quad[1], quad[3])
    center = intersect(diagonal1, diagonal2)

    q = np.ones((4,), dtype=np.float32)
    if center is not None:
        distances = np.hypot(quad[:, 0] - center[0], quad[:, 1] - center[1])
        for i in range(4):
            partner = (i + 2) % 4
            d_partner = float(distances[partner])
            if d_partner > 0.0:
                q[i] = (float(distances[i]) + d_partner) / d_partner

    out = np.empty((4, 3), dtype=np.float32)
    out[:, 0] = q * uv_arr[:, 0]
    out[:, 1] = q * uv_arr[:, 1]
    out[:, 2] = q
    return out


def resolve_uv(uvq: np.ndarray) -> np.ndarray:
    """斉次座標を q で割って (u, v) に戻す（フラグメントシェーダ相当）。"""
    arr = np.asarray(uvq, dtype=np.float32)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"uvq は shape (N,3) である必要がある: got={arr.shape}")
    return arr[:, :2] / arr[:, 2:3]


def interpolate_uvq(uvq_a: np.ndarray, uvq_b: np.ndarray, t: float) -> np.ndarray:
    """2 頂点間を線形補間し、q 除算後の (u, v) を返す（ラスタライザ相当）。"""
    a = np.asarray(uvq_a, dtype=np.float64).reshape(3)
    b = np.asarray(uvq_b, dtype=np.float64).reshape(3)
    mixed = a + (b - a) * float(t)
    return (mixed[:2] / mixed[2]).astype(np.float32)


def iso_segment(
    shape: Sequence[Sequence[float]] | np.ndarray,
    uvq: np.ndarray,
    value: float,
    *,
    axis: int = 0,
) -> np.ndarray:
    """テクスチャ座標の等値線（u=value または v=value）を四角形内の線分として返す。

    Parameters
    ----------
    shape : array-like
        四角形の頂点 shape (4, 2)。
    uvq : np.ndarray
        `projective_texture_coords` の結果 shape (4, 3)。
    value : float
        等値線の値。
    axis : int, optional
        0 なら u、1 なら v の等値線。

    Returns
    -------
    np.ndarray
        float32 型 shape (2, 2)。辺番号の若い側の交点が先。

    Raises
    ------
    ValueError
        等値線が四角形の境界と 2 点で交わらない場合。

    Notes
    -----
    境界の各辺 a→b は三角形分割の辺でもあり、(u*q, v*q, q) が辺上で線形に補間される。
    辺上の位置 s は `s = q_a (c_a - c) / (q_a (c_a - c) + q_b (c - c_b))` で求まる。
    射影写像なので等値線は四角形全体で 1 本の直線になる。
    """
    if axis not in (0, 1):
        raise ValueError(f"axis は 0 または 1 である必要がある: got={axis!r}")
    quad = _as_quad(shape, name="shape").astype(np.float64)
    arr = np.asarray(uvq, dtype=np.float64)
    if arr.shape != (4, 3):
        raise ValueError(f"uvq は shape (4,3) である必要がある: got={arr.shape}")

    c = float(value)
    q = arr[:, 2]
    coord = arr[:, axis] / q

    points: list[np.ndarray] = []
    for a in range(4):
        b = (a + 1) % 4
        ca = float(coord[a])
        cb = float(coord[b])
        if ca == cb or not (min(ca, cb) - _ISO_EPS <= c <= max(ca, cb) + _ISO_EPS):
            continue
        wa = float(q[a]) * (ca - c)
        wb = float(q[b]) * (c - cb)
        s = min(1.0, max(0.0, wa / (wa + wb)))
        points.append(quad[a] + (quad[b] - quad[a]) * s)

    if len(points) != 2:
        raise ValueError(
            f"等値線が四角形の境界と 2 点で交わらない: axis={axis} value={c} hits={len(points)}"
        )
    return np.asarray(points, dtype=np.float32)


__all__ = ["interpolate_uvq", "iso_segment", "projective_texture_coords", "resolve_uv"]
