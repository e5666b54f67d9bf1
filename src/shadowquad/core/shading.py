# どこで: `src/shadowquad/core/shading.py`。
# 何を: 影の縁のぼかし（u 空間のしきい値）と光源の距離減衰を、フラグメント 1 つ分の式として提供する。
# なぜ: 斉次テクスチャ座標から得た u を、描画側（SVG 等）が不透明度へ変換できるようにするため。

from __future__ import annotations

from typing import Sequence

import numpy as np

from shadowquad.core.projective_texture import iso_segment

# 影の縁をぼかす既定幅（u 空間）。
SHADOW_SMOOTH_TH = 0.1

# 光源の既定サイズ。明るさは size / dist^2 で減衰する。
LIGHT_SIZE = 1.0

# ぼかし帯 1 本あたりの分割数。
EDGE_STEPS = 4


def shadow_edge_opacity(u: float | np.ndarray, th: float = SHADOW_SMOOTH_TH) -> np.ndarray:
    """影の横断方向 u（0..1）における影の不透明度を返す。

    Parameters
    ----------
    u : float or np.ndarray
        q 除算後のテクスチャ座標 u。u=0/1 が影の縁、u=0.5 が中心線。
    th : float, optional
        縁からの距離 `mid = 0.5 - |u - 0.5|` がこの値未満の帯をぼかす。
        0 のときはぼかさない（内部は常に不透明度 1）。

    Returns
    -------
    np.ndarray
        float64 型の不透明度（0..1）。入力と同じ shape。

    Notes
    -----
    `mid < th` の帯では `1 - (th - mid) / th = mid / th` で縁に向かって 0 へ落ちる。
    """
    t = float(th)
    if t < 0.0:
        raise ValueError(f"th は非負である必要がある: got={th!r}")
    uu = np.asarray(u, dtype=np.float64)
    mid = 0.5 - np.abs(uu - 0.5)
    if t == 0.0:
        return np.ones_like(mid)
    fade = np.where(mid < t, (t - mid) / t, 0.0)
    return np.clip(1.0 - fade, 0.0, 1.0)


def light_darkness(distance: float | np.ndarray, size: float = LIGHT_SIZE) -> np.ndarray:
    """光源からの距離における暗さ（不透明度 0..1）を返す。

    明るさ `size / dist^2` が 1 以上の範囲は暗さ 0、遠方ほど 1 に近づく。
    光源位置そのもの（dist=0）は暗さ 0 とする。
    """
    s = float(size)
    if s < 0.0:
        raise ValueError(f"size は非負である必要がある: got={size!r}")
    d = np.asarray(distance, dtype=np.float64)
    d2 = d * d
    safe = np.where(d2 > 0.0, d2, 1.0)
    brightness = np.where(d2 > 0.0, s / safe, np.inf)
    return np.clip(1.0 - brightness, 0.0, 1.0)


def light_radius(size: float = LIGHT_SIZE) -> float:
    """暗さが 0 になる境界の半径 `sqrt(size)` を返す。"""
    return float(np.sqrt(max(0.0, float(size))))


def strip_bounds(th: float = SHADOW_SMOOTH_TH, steps: int = EDGE_STEPS) -> np.ndarray:
    """影を u 方向に帯分割するときの境界値（昇順、0 と 1 を含む）を返す。

    ぼかし帯 [0, th] と [1 - th, 1] をそれぞれ steps 等分し、中央は 1 本の帯にする。
    """
    t = min(float(th), 0.5)
    n = int(steps)
    if t < 0.0:
        raise ValueError(f"th は非負である必要がある: got={th!r}")
    if n < 1:
        raise ValueError(f"steps は 1 以上である必要がある: got={steps!r}")
    if t == 0.0:
        return np.array([0.0, 1.0])
    lower = np.linspace(0.0, t, n + 1)
    upper = np.linspace(1.0 - t, 1.0, n + 1)
    return np.unique(np.concatenate([lower, upper]))


def shadow_edge_strips(
    shape: Sequence[Sequence[float]] | np.ndarray,
    uvq: np.ndarray,
    th: float = SHADOW_SMOOTH_TH,
    steps: int = EDGE_STEPS,
) -> list[tuple[np.ndarray, float]]:
    """影四角形を u の等値線で帯に分け、各帯の四角形と不透明度を返す。

    帯の境界は `iso_segment` で斉次テクスチャ座標から求めるため、
    q 除算後の u に沿った（遠近の付いた）分割になる。
    不透明度は帯の中央 u での `shadow_edge_opacity`。
    """
    bounds = strip_bounds(th, steps)
    segments = [iso_segment(shape, uvq, float(u)) for u in bounds]
    strips: list[tuple[np.ndarray, float]] = []
    for k in range(len(bounds) - 1):
        a = segments[k]
        b = segments[k + 1]
        quad = np.stack([a[0], a[1], b[1], b[0]]).astype(np.float32, copy=False)
        u_mid = 0.5 * (float(bounds[k]) + float(bounds[k + 1]))
        strips.append((quad, float(shadow_edge_opacity(u_mid, th))))
    return strips


__all__ = [
    "EDGE_STEPS",
    "LIGHT_SIZE",
    "SHADOW_SMOOTH_TH",
    "light_darkness",
    "light_radius",
    "shadow_edge_opacity",
    "shadow_edge_strips",
    "strip_bounds",
]
