# どこで: `src/shadowquad/core/deformed_quad.py`。
# 何を: 時刻 t で一角が上下に動く変形四角形と、その斉次テクスチャ座標を返す。
# なぜ: 平面四角形の射影でない形でも継ぎ目なくテクスチャが貼れることを確認する題材にするため。

from __future__ import annotations

import math

import numpy as np

from shadowquad.core.projective_texture import projective_texture_coords

DEFORMED_QUAD_UV = np.array(
    [[1.0, 1.0], [0.0, 1.0], [0.0, 0.0], [1.0, 0.0]],
    dtype=np.float32,
)
DEFORMED_QUAD_UV.setflags(write=False)


def deformed_quad(t: float, size: float = 1.0) -> np.ndarray:
    """時刻 t [rad] の変形四角形 float32 shape (4, 2) を返す。

    右上の頂点 y が `sin(t) * size` で動き、左上の頂点は x 方向に 1.5 倍張り出す。
    """
    s = float(size)
    return np.array(
        [
            [-s, -s],
            [s, -s],
            [s, math.sin(float(t)) * s],
            [-1.5 * s, s],
        ],
        dtype=np.float32,
    )


def deformed_quad_texture(t: float, size: float = 1.0) -> tuple[np.ndarray, np.ndarray]:
    """変形四角形と、その斉次テクスチャ座標 (4, 3) を返す。"""
    shape = deformed_quad(t, size)
    return shape, projective_texture_coords(shape, DEFORMED_QUAD_UV)


__all__ = ["DEFORMED_QUAD_UV", "deformed_quad", "deformed_quad_texture"]
