# どこで: `src/shadowquad/__init__.py`。
# 何を: ルート `shadowquad` パッケージを定義し、影計算カーネルの主要 API を再公開する。
# なぜ: import 起点を `shadowquad` に統一するため。

from __future__ import annotations

from shadowquad.core.convex_polygon import ConvexPolygon, generate_convex_polygon
from shadowquad.core.deformed_quad import deformed_quad_texture
from shadowquad.core.errors import DegenerateGeometryError
from shadowquad.core.lines import ImplicitLine, intersect
from shadowquad.core.pipeline import (
    SHADOW_UV,
    ShadowFrame,
    compute_scene_shadows,
    compute_shadow_frame,
)
from shadowquad.core.projective_texture import projective_texture_coords
from shadowquad.core.scene import Scene, create_scene
from shadowquad.core.shading import light_darkness, shadow_edge_opacity
from shadowquad.core.shadow_shape import SHADOW_SIZE, build_shadow_shape
from shadowquad.core.silhouette import find_silhouette_edge

__all__ = [
    "ConvexPolygon",
    "DegenerateGeometryError",
    "ImplicitLine",
    "SHADOW_SIZE",
    "SHADOW_UV",
    "Scene",
    "ShadowFrame",
    "build_shadow_shape",
    "compute_scene_shadows",
    "compute_shadow_frame",
    "create_scene",
    "deformed_quad_texture",
    "find_silhouette_edge",
    "generate_convex_polygon",
    "intersect",
    "light_darkness",
    "projective_texture_coords",
    "shadow_edge_opacity",
]
