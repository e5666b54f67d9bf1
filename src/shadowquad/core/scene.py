# どこで: `src/shadowquad/core/scene.py`。
# 何を: ランダム凸多角形を横一列に並べたシーンを生成する。
# なぜ: 多角形はシーン生成時に一度だけ作り、フレームごとの計算には位置と光源だけを渡すため。

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from shadowquad.core.convex_polygon import ConvexPolygon, generate_convex_polygon

DEFAULT_POLYGON_COUNT = 4
DEFAULT_SAMPLE_COUNT = 10
DEFAULT_RADIUS = 0.3


@dataclass(frozen=True, slots=True)
class Scene:
    """凸多角形とそのワールド配置の組。

    Parameters
    ----------
    polygons : tuple[ConvexPolygon, ...]
        ローカル座標の凸多角形列。
    positions : np.ndarray
        float32 型 shape (N, 2) の配置オフセット。polygons と同じ長さ。
    """

    polygons: tuple[ConvexPolygon, ...]
    positions: np.ndarray

    def __post_init__(self) -> None:
        polygons = tuple(self.polygons)
        positions = np.asarray(self.positions, dtype=np.float32).reshape(-1, 2).copy()
        if positions.shape[0] != len(polygons):
            raise ValueError(
                "positions の行数は polygons の数と一致する必要がある: "
                f"polygons={len(polygons)}, positions={positions.shape[0]}"
            )
        positions.setflags(write=False)
        object.__setattr__(self, "polygons", polygons)
        object.__setattr__(self, "positions", positions)

    def __len__(self) -> int:
        return len(self.polygons)


def row_positions(polygon_count: int) -> np.ndarray:
    """polygon_count 個の多角形を x 軸上に並べる配置 (N, 2) を返す。

    i 番目の x は `(2*i - (N + 1) // 2) * 2 / N`（整数除算）。
    """
    n = int(polygon_count)
    if n <= 0:
        return np.zeros((0, 2), dtype=np.float32)
    i = np.arange(n, dtype=np.int64)
    x = (2 * i - (n + 1) // 2).astype(np.float32) * np.float32(2.0 / n)
    return np.stack([x, np.zeros_like(x)], axis=1)


def create_scene(
    polygon_count: int = DEFAULT_POLYGON_COUNT,
    sample_count: int = DEFAULT_SAMPLE_COUNT,
    radius: float = DEFAULT_RADIUS,
    *,
    seed: int | None = None,
) -> Scene:
    """ランダム凸多角形を横一列に並べたシーンを生成する。

    Raises
    ------
    ValueError
        polygon_count が負の場合、または radius が不正な場合。
    """
    n = int(polygon_count)
    if n < 0:
        raise ValueError(f"polygon_count は 0 以上である必要がある: got={polygon_count!r}")
    rng = np.random.default_rng(seed)
    polygons = tuple(
        generate_convex_polygon(int(sample_count), float(radius), rng=rng) for _ in range(n)
    )
    return Scene(polygons=polygons, positions=row_positions(n))


__all__ = [
    "DEFAULT_POLYGON_COUNT",
    "DEFAULT_RADIUS",
    "DEFAULT_SAMPLE_COUNT",
    "Scene",
    "create_scene",
    "row_positions",
]
