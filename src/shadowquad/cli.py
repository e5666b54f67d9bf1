# どこで: `src/shadowquad/cli.py`。
# 何を: 指定した光源位置でシーンの影を計算し、SVG（と任意で頂点バッファ）として保存するコマンドを提供する。
# なぜ: ウィンドウを開かずに影の形状を確認できる入口を用意するため。

from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path

import numpy as np

from shadowquad.core.index_buffer import (
    PolygonBuffers,
    build_polygon_buffers,
    build_shadow_buffers,
)
from shadowquad.core.pipeline import compute_scene_shadows
from shadowquad.core.runtime_config import runtime_config, set_config_path
from shadowquad.core.scene import create_scene
from shadowquad.export.svg import export_deformed_quad_svg, export_frame_svg

_logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="shadowquad",
        description="凸多角形の影を計算して SVG に保存する",
    )
    p.add_argument(
        "--light",
        nargs=2,
        type=float,
        metavar=("X", "Y"),
        default=(0.0, 1.0),
        help="光源位置（ワールド座標）",
    )
    p.add_argument("--seed", type=int, default=None, help="多角形生成の乱数シード")
    p.add_argument("--polygons", type=int, default=None, help="多角形の数（config より優先）")
    p.add_argument("--samples", type=int, default=None, help="凸包に使うサンプル点数")
    p.add_argument("--radius", type=float, default=None, help="サンプル円の半径")
    p.add_argument("--extrusion", type=float, default=None, help="影の押し出し長")
    p.add_argument(
        "--smooth-threshold",
        type=float,
        default=None,
        help="影の縁をぼかす u 空間の幅（0 で硬い縁）",
    )
    p.add_argument(
        "--light-size",
        type=float,
        default=None,
        help="光源の明るさ（size / dist^2 で減衰、0 で減衰を描かない）",
    )
    p.add_argument("--out", type=str, default=None, help="出力 SVG パス")
    p.add_argument("--debug-edges", action="store_true", help="シルエット辺を重ねて描く")
    p.add_argument(
        "--buffers",
        type=str,
        default=None,
        help="影/多角形の頂点・インデックス配列を .npz に保存するパス",
    )
    p.add_argument(
        "--deformed-quad",
        type=float,
        default=None,
        metavar="T",
        help="シーンの代わりに時刻 T [rad] の変形四角形とテクスチャ格子を描く",
    )
    p.add_argument("--config", type=str, default=None, help="config.yaml のパス")
    p.add_argument("-v", "--verbose", action="store_true", help="DEBUG ログを出す")
    return p.parse_args(argv)


def _save_buffers(
    path: Path,
    shadow_vertices: np.ndarray,
    shadow_indices: np.ndarray,
    polygons: PolygonBuffers,
) -> Path:
    """影と多角形の頂点/インデックス配列を .npz として保存する。"""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        np.savez(
            f,
            shadow_vertices=shadow_vertices,
            shadow_indices=shadow_indices,
            polygon_vertices=polygons.vertices,
            polygon_fill_indices=polygons.fill_indices,
            polygon_outline_indices=polygons.outline_indices,
        )
    return path


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.config is not None:
        set_config_path(args.config)
    try:
        cfg = runtime_config()
    except (RuntimeError, ValueError, FileNotFoundError) as exc:
        _logger.error("設定を読み込めません: %s", exc)
        return 2

    if args.deformed_quad is not None:
        if not math.isfinite(args.deformed_quad):
            _logger.error(
                "--deformed-quad は有限値である必要があります: got=%r", args.deformed_quad
            )
            return 2
        out_path = (
            Path(args.out)
            if args.out is not None
            else cfg.output_dir / "svg" / "deformed_quad.svg"
        )
        saved = export_deformed_quad_svg(
            float(args.deformed_quad),
            out_path,
            canvas_size=cfg.canvas_size,
            view_size=cfg.view_size,
        )
        print(f"Saved SVG: {saved}")  # noqa: T201
        return 0

    light = (float(args.light[0]), float(args.light[1]))
    if not all(math.isfinite(v) for v in light):
        _logger.error("--light は有限値である必要があります: got=%r", light)
        return 2

    polygon_count = cfg.polygon_count if args.polygons is None else int(args.polygons)
    sample_count = cfg.sample_count if args.samples is None else int(args.samples)
    radius = cfg.radius if args.radius is None else float(args.radius)
    extrusion_length = cfg.extrusion_length if args.extrusion is None else float(args.extrusion)
    smooth_threshold = (
        cfg.smooth_threshold if args.smooth_threshold is None else float(args.smooth_threshold)
    )
    light_size = cfg.light_size if args.light_size is None else float(args.light_size)
    if not (math.isfinite(smooth_threshold) and 0.0 <= smooth_threshold <= 0.5):
        _logger.error("--smooth-threshold は [0, 0.5] の範囲である必要があります")
        return 2
    if not (math.isfinite(light_size) and light_size >= 0.0):
        _logger.error("--light-size は有限の非負値である必要があります")
        return 2

    try:
        scene = create_scene(polygon_count, sample_count, radius, seed=args.seed)
        frames = compute_scene_shadows(scene, light, extrusion_length=extrusion_length)
    except ValueError as exc:
        _logger.error("引数が不正です: %s", exc)
        return 2

    shadow_vertices, shadow_indices, stats = build_shadow_buffers(frames)
    _logger.info(
        "shadows: %d/%d polygons, %d vertices, %d indices",
        stats.quads,
        len(scene),
        stats.vertices,
        stats.indices,
    )
    if args.buffers is not None:
        saved_buffers = _save_buffers(
            Path(args.buffers), shadow_vertices, shadow_indices, build_polygon_buffers(scene)
        )
        print(f"Saved buffers: {saved_buffers}")  # noqa: T201

    out_path = (
        Path(args.out) if args.out is not None else cfg.output_dir / "svg" / "shadowquad.svg"
    )
    saved = export_frame_svg(
        scene,
        frames,
        light,
        out_path,
        canvas_size=cfg.canvas_size,
        view_size=cfg.view_size,
        debug_edges=bool(args.debug_edges),
        smooth_threshold=smooth_threshold,
        light_size=light_size if light_size > 0.0 else None,
    )
    print(f"Saved SVG: {saved}")  # noqa: T201
    return 0


__all__ = ["main"]
