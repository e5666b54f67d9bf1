# どこで: `src/shadowquad/core/index_buffer.py`。
# 何を: 影四角形と凸多角形の頂点/インデックス配列を生成する。
# なぜ: GPU 転送側から切り離した純粋関数にして、テストしやすくするため。

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence

import numpy as np

from shadowquad.core.pipeline import ShadowFrame
from shadowquad.core.scene import Scene

# 影四角形 1 枚を 2 三角形で描くためのインデックス。
QUAD_INDEX_PATTERN = (0, 1, 2, 3, 2, 0)

# 頂点 1 つあたりの float 数: pos(x, y) + uvq(u*q, v*q, q)。
SHADOW_VERTEX_STRIDE = 5


@dataclass(frozen=True, slots=True)
class ShadowBufferStats:
    """影バッファの簡易統計。"""

    quads: int
    vertices: int
    indices: int


def build_shadow_indices(n_quads: int) -> np.ndarray:
    """n_quads 枚の影四角形用インデックス配列（uint32, 6*n_quads）を返す。

    Notes
    -----
    内容は n_quads だけで決まるため、枚数ごとに LRU キャッシュする（読み取り専用）。
    """
    n = int(n_quads)
    if n <= 0:
        return np.zeros((0,), dtype=np.uint32)
    return _build_shadow_indices_cached(n)


@lru_cache(maxsize=64)
def _build_shadow_indices_cached(n_quads: int) -> np.ndarray:
    pattern = np.asarray(QUAD_INDEX_PATTERN, dtype=np.uint32)
    # 各四角形のインデックスは 4 * k だけずらす。
    shift = (np.arange(n_quads, dtype=np.uint32) * np.uint32(4))[:, None]
    out = (pattern[None, :] + shift).reshape(-1)
    out.setflags(write=False)
    return out


def build_shadow_vertices(frames: Sequence[ShadowFrame]) -> np.ndarray:
    """影フレーム列から頂点配列 float32 shape (4*n, 5) を作る。

    各行は `(x, y, u*q, v*q, q)`。
    """
    if not frames:
        return np.zeros((0, SHADOW_VERTEX_STRIDE), dtype=np.float32)
    out = np.empty((4 * len(frames), SHADOW_VERTEX_STRIDE), dtype=np.float32)
    for k, frame in enumerate(frames):
        rows = slice(4 * k, 4 * k + 4)
        out[rows, :2] = frame.shape
        out[rows, 2:] = frame.uvq
    return out


def build_shadow_buffers(
    frames: Sequence[ShadowFrame],
) -> tuple[np.ndarray, np.ndarray, ShadowBufferStats]:
    """頂点配列・インデックス配列・統計をまとめて返す。"""
    vertices = build_shadow_vertices(frames)
    indices = build_shadow_indices(len(frames))
    stats = ShadowBufferStats(
        quads=len(frames),
        vertices=int(vertices.shape[0]),
        indices=int(indices.size),
    )
    return vertices, indices, stats


@lru_cache(maxsize=64)
def _build_fan_indices_cached(n_vertices: int) -> np.ndarray:
    i = np.arange(1, n_vertices - 1, dtype=np.uint32)
    out = np.stack([np.zeros_like(i), i, i + np.uint32(1)], axis=1).reshape(-1)
    out.setflags(write=False)
    return out


def build_fan_indices(n_vertices: int) -> np.ndarray:
    """凸多角形を扇状に三角形分割するインデックス `(0, i, i+1)` を返す。"""
    n = int(n_vertices)
    if n < 3:
        return np.zeros((0,), dtype=np.uint32)
    return _build_fan_indices_cached(n)


def build_outline_indices(n_vertices: int) -> np.ndarray:
    """閉じた輪郭線を GL_LINES で描くインデックス `(i, (i+1) % n)` を返す。"""
    n = int(n_vertices)
    if n < 2:
        return np.zeros((0,), dtype=np.uint32)
    i = np.arange(n, dtype=np.uint32)
    return np.stack([i, (i + np.uint32(1)) % np.uint32(n)], axis=1).reshape(-1)


@dataclass(frozen=True, slots=True)
class PolygonBuffers:
    """シーン内の凸多角形をまとめた頂点/インデックス配列。"""

    vertices: np.ndarray  # (M, 2) float32, ワールド座標
    fill_indices: np.ndarray  # uint32, 扇状三角形 (0, i, i+1)
    outline_indices: np.ndarray  # uint32, 線分 (i, i+1)


def build_polygon_buffers(scene: Scene) -> PolygonBuffers:
    """シーンの多角形を 1 本の頂点配列に連結し、塗り/輪郭のインデックスを作る。

    各多角形のインデックスは連結後の先頭位置だけずらす。
    頂点 3 未満の多角形は塗りに寄与せず、輪郭は頂点 2 以上のときだけ出る。
    """
    vertex_chunks: list[np.ndarray] = []
    fill_chunks: list[np.ndarray] = []
    outline_chunks: list[np.ndarray] = []
    base = 0
    for polygon, position in zip(scene.polygons, scene.positions):
        n = polygon.vertex_count
        vertex_chunks.append(polygon.world_coords(position))
        fill_chunks.append(build_fan_indices(n) + np.uint32(base))
        outline_chunks.append(build_outline_indices(n) + np.uint32(base))
        base += n

    if not vertex_chunks:
        empty = np.zeros((0,), dtype=np.uint32)
        return PolygonBuffers(np.zeros((0, 2), dtype=np.float32), empty, empty.copy())
    return PolygonBuffers(
        vertices=np.concatenate(vertex_chunks).astype(np.float32, copy=False),
        fill_indices=np.concatenate(fill_chunks).astype(np.uint32, copy=False),
        outline_indices=np.concatenate(outline_chunks).astype(np.uint32, copy=False),
    )


__all__ = [
    "PolygonBuffers",
    "QUAD_INDEX_PATTERN",
    "SHADOW_VERTEX_STRIDE",
    "ShadowBufferStats",
    "build_fan_indices",
    "build_outline_indices",
    "build_polygon_buffers",
    "build_shadow_buffers",
    "build_shadow_indices",
    "build_shadow_vertices",
]
