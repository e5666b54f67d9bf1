# src/shadowquad/core/convex_polygon.py
# 凸多角形モデルと、円内サンプル点の凸包によるランダム凸多角形生成。

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class ConvexPolygon:
    """ローカル座標系の凸多角形。

    Parameters
    ----------
    coords : np.ndarray
        float32 型 shape (N, 2) の頂点配列。閉じ点（先頭の複製）は含まない。

    Notes
    -----
    不変性を契約とし、配列は writeable=False で保持する。
    N < 3 の退化多角形も表現できる（生成側が凸包を作れなかった場合）。
    """

    coords: np.ndarray

    def __post_init__(self) -> None:
        coords = np.asarray(self.coords)
        if coords.size == 0:
            coords = np.zeros((0, 2), dtype=np.float32)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise ValueError("coords は shape (N,2) の 2 次元配列である必要がある")
        if coords.dtype != np.float32:
            coords = coords.astype(np.float32)
        else:
            coords = coords.copy()
        coords.setflags(write=False)
        object.__setattr__(self, "coords", coords)

    @property
    def vertex_count(self) -> int:
        """頂点数を返す。"""
        return int(self.coords.shape[0])

    @property
    def is_degenerate(self) -> bool:
        """面積を持たない（頂点 3 未満）なら True。"""
        return self.vertex_count < 3

    def world_coords(self, position: np.ndarray | tuple[float, float]) -> np.ndarray:
        """position だけ平行移動したワールド座標 (N, 2) を返す。"""
        offset = np.asarray(position, dtype=np.float32).reshape(2)
        return self.coords + offset

    def is_convex(self) -> bool:
        """全ての頂点で同じ向きに曲がる（厳密に凸）なら True を返す。"""
        return is_convex(self.coords)


def is_convex(coords: np.ndarray) -> bool:
    """頂点列が厳密な凸多角形を成すか判定する。

    Notes
    -----
    連続 3 点の外積がすべて同符号（0 を含まない）であることを確認する。
    3 点未満は凸多角形とみなさない。
    """
    pts = np.asarray(coords, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[0] < 3:
        return False
    edges = np.roll(pts, -1, axis=0) - pts
    nxt = np.roll(edges, -1, axis=0)
    cross = edges[:, 0] * nxt[:, 1] - edges[:, 1] * nxt[:, 0]
    return bool(np.all(cross > 0.0) or np.all(cross < 0.0))


def sample_disk_points(
    sample_count: int,
    radius: float,
    *,
    rng: np.random.Generator,
) -> np.ndarray:
    """半径 radius の円内に点をサンプルする。

    x を [-radius, radius] で一様に取り、その x での弦の半分
    `chord = sqrt(radius^2 - x^2)` を使って y を [-chord, chord] で一様に取る。
    面積一様ではなく、円の左右端ほど点が密になる分布をそのまま使う。

    Returns
    -------
    np.ndarray
        float32 型 shape (sample_count, 2) の点列。
    """
    n = max(0, int(sample_count))
    r = float(radius)
    x = rng.uniform(-r, r, size=n)
    chord = np.sqrt(np.maximum(r * r - x * x, 0.0))
    y = rng.uniform(-chord, chord)
    return np.stack([x, y], axis=1).astype(np.float32, copy=False).reshape(n, 2)


def _drop_adjacent_duplicates(points: np.ndarray) -> np.ndarray:
    """連続する重複点（末尾→先頭の巡回も含む）を取り除く。"""
    if points.shape[0] < 2:
        return points
    keep = np.any(points != np.roll(points, 1, axis=0), axis=1)
    if not np.any(keep):
        return points[:1]
    return points[keep]


def convex_hull(points: np.ndarray) -> np.ndarray:
    """点群の凸包頂点列（反時計回り、閉じ点なし）を返す。

    凸包が点や線分に潰れた場合は、その構成点（重複なし）を返す。
    """
    # ローカル import（shapely は凸包生成時にだけ必要）
    from shapely.geometry import MultiPoint, Polygon  # type: ignore[import-untyped]
    from shapely.geometry.polygon import orient  # type: ignore[import-untyped]

    pts = np.asarray(points, dtype=np.float32).reshape(-1, 2)
    if pts.shape[0] == 0:
        return np.zeros((0, 2), dtype=np.float32)

    hull = MultiPoint([(float(x), float(y)) for x, y in pts]).convex_hull
    if isinstance(hull, Polygon):
        ring = np.asarray(orient(hull, sign=1.0).exterior.coords, dtype=np.float32)
        # shapely の exterior は先頭点を終端に複製して閉じている。
        out = ring[:-1]
    else:
        # Point / LineString: 面積 0 の退化凸包。
        out = np.asarray(hull.coords, dtype=np.float32).reshape(-1, 2)
    return _drop_adjacent_duplicates(out)


def generate_convex_polygon(
    sample_count: int,
    radius: float,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> ConvexPolygon:
    """円内のランダム点をサンプルし、その凸包を凸多角形として返す。

    Parameters
    ----------
    sample_count : int
        サンプル点数。3 未満の場合は退化多角形（点 0〜2 個）を返す。
    radius : float
        サンプル円の半径。有限の非負値である必要がある。
    seed : int or None, optional
        乱数シード。rng が与えられた場合は無視する。
    rng : np.random.Generator or None, optional
        共有乱数生成器。シーン内で複数の多角形を順に生成する場合に使う。

    Returns
    -------
    ConvexPolygon
        凸包多角形（ローカル座標、原点中心）。

    Raises
    ------
    ValueError
        radius が負または非有限の場合。
    """
    r = float(radius)
    if not math.isfinite(r) or r < 0.0:
        raise ValueError(f"radius は有限の非負値である必要がある: got={radius!r}")

    if rng is None:
        rng = np.random.default_rng(seed)

    points = sample_disk_points(int(sample_count), r, rng=rng)
    return ConvexPolygon(coords=convex_hull(points))


__all__ = [
    "ConvexPolygon",
    "convex_hull",
    "generate_convex_polygon",
    "is_convex",
    "sample_disk_points",
]
