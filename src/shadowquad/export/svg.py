"""
どこで: `src/shadowquad/export/svg.py`。
何を: シーンと 1 フレーム分の影、および変形四角形のテクスチャ格子を SVG として保存する関数を提供する。
なぜ: ウィンドウ/GPU なしで影の形状と斉次テクスチャ座標の効果を確認・保存できるようにするため。
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import numpy as np

from shadowquad.core.deformed_quad import deformed_quad_texture
from shadowquad.core.index_buffer import build_fan_indices, build_outline_indices
from shadowquad.core.pipeline import ShadowFrame
from shadowquad.core.projective_texture import iso_segment
from shadowquad.core.scene import Scene
from shadowquad.core.shading import (
    EDGE_STEPS,
    SHADOW_SMOOTH_TH,
    light_darkness,
    shadow_edge_strips,
)

_SVG_NS = "http://www.w3.org/2000/svg"
_FLOAT_DECIMALS = 3

# 光源マーカー（三角形）の大きさ（ワールド単位）。
LIGHT_MARKER_SIZE = 0.1

BACKGROUND_COLOR = (1.0, 1.0, 0.5)
SHADOW_COLOR = (0.0, 0.0, 0.0)
POLYGON_COLOR = (1.0, 1.0, 1.0)
EDGE_COLOR = (1.0, 0.0, 0.0)
LIGHT_COLOR = (0.0, 0.0, 1.0)
DARKNESS_COLOR = (0.0, 0.0, 0.0)
QUAD_COLOR = (0.85, 0.85, 0.85)
GRID_COLOR = (0.2, 0.2, 0.8)

# 光源減衰グラデーションの停止点の数。
_FALLOFF_STOPS = 32
_FALLOFF_ID = "light-falloff"


def _fmt(value: float, *, decimals: int = _FLOAT_DECIMALS) -> str:
    """SVG 出力向けに float を決定的な文字列へ変換して返す。"""
    text = f"{float(value):.{int(decimals)}f}"
    if text.startswith("-0") and float(text) == 0.0:
        return text[1:]
    return text


def _rgb01_to_hex(rgb01: tuple[float, float, float]) -> str:
    """0..1 float RGB を #RRGGBB に変換して返す。"""
    r, g, b = (int(round(max(0.0, min(1.0, float(c))) * 255.0)) for c in rgb01)
    return f"#{r:02X}{g:02X}{b:02X}"


class _WorldToCanvas:
    """ワールド座標（y 上向き、原点中心）をキャンバス座標（y 下向き）へ写す。"""

    def __init__(self, canvas_size: tuple[int, int], view_size: float) -> None:
        self._w = float(canvas_size[0])
        self._h = float(canvas_size[1])
        self.scale = self._w / float(view_size)

    def __call__(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        x = pts[:, 0] * self.scale + self._w / 2.0
        y = self._h / 2.0 - pts[:, 1] * self.scale
        return np.stack([x, y], axis=1)

    def farthest_corner_distance(self, canvas_xy: np.ndarray) -> float:
        """canvas_xy からキャンバス四隅までの最大距離 [px] を返す。"""
        corners = np.array([[0.0, 0.0], [self._w, 0.0], [self._w, self._h], [0.0, self._h]])
        offset = corners - np.asarray(canvas_xy, dtype=np.float64).reshape(1, 2)
        return float(np.max(np.hypot(offset[:, 0], offset[:, 1])))


def _closed_path_d(canvas_xy: np.ndarray) -> str:
    """頂点列（shape (N,2)）を閉じた SVG path の d 属性へ変換して返す。"""
    parts = [f"M {_fmt(canvas_xy[0, 0])} {_fmt(canvas_xy[0, 1])}"]
    for xy in canvas_xy[1:]:
        parts.append(f"L {_fmt(xy[0])} {_fmt(xy[1])}")
    parts.append("Z")
    return " ".join(parts)


def _line(cls: str, a: np.ndarray, b: np.ndarray, stroke: str) -> str:
    return (
        f'  <line class="{cls}" x1="{_fmt(a[0])}" y1="{_fmt(a[1])}" '
        f'x2="{_fmt(b[0])}" y2="{_fmt(b[1])}" stroke="{stroke}" stroke-width="1" />'
    )


def _light_marker(light: np.ndarray) -> np.ndarray:
    mx, my = float(light[0]), float(light[1])
    s = LIGHT_MARKER_SIZE
    return np.array([[mx, my - s], [mx + s, my + s], [mx - s, my + s]], dtype=np.float64)


def _check_canvas(canvas_size: tuple[int, int], view_size: float) -> tuple[int, int]:
    canvas_w, canvas_h = canvas_size
    if canvas_w <= 0 or canvas_h <= 0:
        raise ValueError("canvas_size は正の値である必要がある")
    if float(view_size) <= 0.0:
        raise ValueError("view_size は正の値である必要がある")
    return int(canvas_w), int(canvas_h)


def _svg_header(canvas_w: int, canvas_h: int) -> list[str]:
    return [
        '<?xml version="1.0" encoding="UTF-8"?>',
        (
            f'<svg xmlns="{_SVG_NS}" viewBox="0 0 {canvas_w} {canvas_h}" '
            f'width="{canvas_w}" height="{canvas_h}">'
        ),
    ]


def _background(canvas_w: int, canvas_h: int) -> str:
    return (
        f'  <rect x="0" y="0" width="{canvas_w}" height="{canvas_h}" '
        f'fill="{_rgb01_to_hex(BACKGROUND_COLOR)}" />'
    )


def _write_svg(path: Path, lines: list[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write("\n".join(lines) + "\n")
    return path


def _falloff_gradient(
    to_canvas: _WorldToCanvas,
    light_xy: np.ndarray,
    light_size: float,
) -> list[str]:
    """光源を中心とした暗さの放射グラデーション定義を返す。

    停止点の不透明度は `light_darkness` をキャンバス最遠点までの距離で標本化したもの。
    """
    center = to_canvas(light_xy)[0]
    radius_px = max(to_canvas.farthest_corner_distance(center), 1.0)
    radius_world = radius_px / to_canvas.scale
    offsets = np.linspace(0.0, 1.0, _FALLOFF_STOPS)
    alphas = light_darkness(offsets * radius_world, light_size)

    color = _rgb01_to_hex(DARKNESS_COLOR)
    lines = [
        "  <defs>",
        (
            f'    <radialGradient id="{_FALLOFF_ID}" gradientUnits="userSpaceOnUse" '
            f'cx="{_fmt(center[0])}" cy="{_fmt(center[1])}" r="{_fmt(radius_px)}">'
        ),
    ]
    for offset, alpha in zip(offsets, alphas):
        lines.append(
            f'      <stop offset="{_fmt(offset)}" stop-color="{color}" '
            f'stop-opacity="{_fmt(alpha)}" />'
        )
    lines.append("    </radialGradient>")
    lines.append("  </defs>")
    return lines


def export_frame_svg(
    scene: Scene,
    frames: Sequence[ShadowFrame],
    light: Sequence[float] | np.ndarray,
    path: str | Path,
    *,
    canvas_size: tuple[int, int],
    view_size: float,
    debug_edges: bool = False,
    smooth_threshold: float = SHADOW_SMOOTH_TH,
    edge_steps: int = EDGE_STEPS,
    light_size: float | None = None,
) -> Path:
    """シーンと影フレームを SVG として保存する。

    Parameters
    ----------
    scene : Scene
        描画する多角形とその配置。
    frames : Sequence[ShadowFrame]
        `compute_scene_shadows` の結果。
    light : array-like
        光源位置（ワールド座標）。
    path : str or Path
        出力先パス。親ディレクトリは必要なら作成する。
    canvas_size : tuple[int, int]
        出力キャンバス寸法 [px]。
    view_size : float
        キャンバス幅に収めるワールド座標の幅。
    debug_edges : bool, optional
        True のとき、シルエット辺を線で重ねて描く。
    smooth_threshold : float, optional
        影の縁をぼかす u 空間の幅。各影は斉次テクスチャ座標の u 等値線で帯に分け、
        帯ごとの不透明度で塗る。
    edge_steps : int, optional
        ぼかし帯 1 本あたりの分割数。
    light_size : float or None, optional
        光源の明るさ。None 以外のとき、`size / dist^2` による暗さを
        放射グラデーションで背景に重ねる。

    Returns
    -------
    Path
        保存先パス。

    Raises
    ------
    ValueError
        canvas_size / view_size が正でない場合。
    """
    _path = Path(path)
    canvas_w, canvas_h = _check_canvas(canvas_size, view_size)
    to_canvas = _WorldToCanvas((canvas_w, canvas_h), float(view_size))
    light_xy = np.asarray(light, dtype=np.float32).reshape(2)

    lines = _svg_header(canvas_w, canvas_h)
    if light_size is not None:
        lines.extend(_falloff_gradient(to_canvas, light_xy, float(light_size)))
    lines.append(_background(canvas_w, canvas_h))
    if light_size is not None:
        lines.append(
            f'  <rect class="darkness" x="0" y="0" width="{canvas_w}" height="{canvas_h}" '
            f'fill="url(#{_FALLOFF_ID})" />'
        )

    shadow_fill = _rgb01_to_hex(SHADOW_COLOR)
    for frame in frames:
        lines.append(f'  <g class="shadow" data-index="{int(frame.index)}">')
        for quad, alpha in shadow_edge_strips(
            frame.shape, frame.uvq, smooth_threshold, edge_steps
        ):
            d = _closed_path_d(to_canvas(quad))
            lines.append(
                f'    <path class="shadow-strip" d="{d}" fill="{shadow_fill}" '
                f'fill-opacity="{_fmt(alpha)}" stroke="none" />'
            )
        lines.append("  </g>")

    polygon_fill = _rgb01_to_hex(POLYGON_COLOR)
    for polygon, position in zip(scene.polygons, scene.positions):
        if polygon.is_degenerate:
            continue
        d = _closed_path_d(to_canvas(polygon.world_coords(position)))
        lines.append(f'  <path class="polygon" d="{d}" fill="{polygon_fill}" stroke="none" />')

    if debug_edges:
        edge_stroke = _rgb01_to_hex(EDGE_COLOR)
        for frame in frames:
            position = scene.positions[frame.index]
            a, b = to_canvas(np.stack(frame.edge) + position)
            lines.append(_line("edge", a, b, edge_stroke))

    d = _closed_path_d(to_canvas(_light_marker(light_xy)))
    lines.append(
        f'  <path class="light" d="{d}" fill="{_rgb01_to_hex(LIGHT_COLOR)}" stroke="none" />'
    )

    lines.append("</svg>")
    return _write_svg(_path, lines)


def export_deformed_quad_svg(
    t: float,
    path: str | Path,
    *,
    canvas_size: tuple[int, int],
    view_size: float,
    size: float = 1.0,
    grid: int = 8,
) -> Path:
    """時刻 t の変形四角形を、テクスチャ格子（u/v 等値線）付きで SVG に保存する。

    四角形は扇状 2 三角形で塗り、格子線は斉次テクスチャ座標から求める。
    q 除算が効いていれば格子線は対角線で折れずに直線のまま横断する。
    """
    _path = Path(path)
    n = int(grid)
    if n < 1:
        raise ValueError(f"grid は 1 以上である必要がある: got={grid!r}")
    canvas_w, canvas_h = _check_canvas(canvas_size, view_size)
    to_canvas = _WorldToCanvas((canvas_w, canvas_h), float(view_size))

    shape, uvq = deformed_quad_texture(t, size)
    canvas_xy = to_canvas(shape)

    lines = _svg_header(canvas_w, canvas_h)
    lines.append(_background(canvas_w, canvas_h))

    quad_fill = _rgb01_to_hex(QUAD_COLOR)
    fan = build_fan_indices(4).reshape(-1, 3)
    for tri in fan:
        d = _closed_path_d(canvas_xy[tri])
        lines.append(f'  <path class="triangle" d="{d}" fill="{quad_fill}" stroke="none" />')

    grid_stroke = _rgb01_to_hex(GRID_COLOR)
    for axis, cls in ((0, "grid-u"), (1, "grid-v")):
        for k in range(n + 1):
            a, b = to_canvas(iso_segment(shape, uvq, k / n, axis=axis))
            lines.append(_line(cls, a, b, grid_stroke))

    outline_stroke = _rgb01_to_hex(SHADOW_COLOR)
    for i, j in build_outline_indices(4).reshape(-1, 2):
        lines.append(_line("outline", canvas_xy[i], canvas_xy[j], outline_stroke))

    lines.append("</svg>")
    return _write_svg(_path, lines)


__all__ = ["export_deformed_quad_svg", "export_frame_svg"]
