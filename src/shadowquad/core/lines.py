"""
どこで: `src/shadowquad/core/lines.py`。
何を: 陰関数表現の直線 `a*x + b*y + c = 0` と、クラメルの公式による交点計算を提供する。
なぜ: 射影テクスチャ座標の計算で四角形の対角線交点が必要なため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

# 平行/一致判定に使う行列式の閾値。
EPS = 1e-9


@dataclass(frozen=True, slots=True)
class ImplicitLine:
    """2 点を通る無限直線 `a*x + b*y + c = 0`。"""

    a: float
    b: float
    c: float

    @classmethod
    def from_segment(cls, p: Sequence[float], q: Sequence[float]) -> "ImplicitLine":
        """2 点 p, q を通る直線を返す。

        Notes
        -----
        p == q のときは a == b == 0 の退化直線になる（例外にはしない）。
        """
        px, py = float(p[0]), float(p[1])
        qx, qy = float(q[0]), float(q[1])
        a = py - qy
        b = qx - px
        return cls(a=a, b=b, c=-a * px - b * py)


def det(a: float, b: float, c: float, d: float) -> float:
    """2x2 行列 [[a, b], [c, d]] の行列式。"""
    return a * d - b * c


def intersect(line1: ImplicitLine, line2: ImplicitLine) -> np.ndarray | None:
    """2 直線の交点を返す。

    Parameters
    ----------
    line1, line2 : ImplicitLine
        交差を調べる直線。

    Returns
    -------
    np.ndarray or None
        交点 shape (2,) float32。平行または一致（|det| < EPS）の場合は None。
    """
    divisor = det(line1.a, line1.b, line2.a, line2.b)
    # 平行 or 同一直線
    if abs(divisor) < EPS:
        return None
    x = -det(line1.c, line1.b, line2.c, line2.b) / divisor
    y = -det(line1.a, line1.c, line2.a, line2.c) / divisor
    return np.array([x, y], dtype=np.float32)


__all__ = ["EPS", "ImplicitLine", "det", "intersect"]
