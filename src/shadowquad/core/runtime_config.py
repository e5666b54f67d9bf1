# どこで: `src/shadowquad/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・ロード・キャッシュ）を提供する。
# なぜ: シーン生成や影の押し出し長、出力先をコードを変えずに差し替えられるようにするため。

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """shadowquad の実行時設定。"""

    config_path: Path | None
    output_dir: Path
    polygon_count: int
    sample_count: int
    radius: float
    extrusion_length: float
    smooth_threshold: float
    light_size: float
    canvas_size: tuple[int, int]
    view_size: float


_EXPLICIT_CONFIG_PATH: Path | None = None
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Notes
    -----
    `path` を None にすると明示指定を解除し、既定の探索に戻る。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    if path is None:
        _EXPLICIT_CONFIG_PATH = None
        _CONFIG_CACHE = None
        return
    _EXPLICIT_CONFIG_PATH = Path(str(path)).expanduser()
    _CONFIG_CACHE = None


def _default_config_candidates() -> tuple[Path, ...]:
    cwd = Path.cwd()
    home = Path.home()
    return (
        cwd / ".shadowquad" / "config.yaml",
        home / ".config" / "shadowquad" / "config.yaml",
    )


def _expand_path_text(text: str) -> str:
    return os.path.expandvars(os.path.expanduser(str(text)))


def _as_optional_path(value: Any) -> Path | None:
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    return Path(_expand_path_text(s))


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _as_int_pair(value: Any, *, key: str) -> tuple[int, int] | None:
    if value is None:
        return None
    try:
        seq = list(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は [x, y] の配列である必要があります: got={value!r}") from exc
    if len(seq) != 2:
        raise RuntimeError(f"{key} は [x, y] の配列である必要があります: got={value!r}")
    x = _as_int(seq[0], key=key)
    y = _as_int(seq[1], key=key)
    if x is None or y is None:
        raise RuntimeError(f"{key} は [x, y] の整数配列である必要があります: got={value!r}")
    return (x, y)


def _as_int(value: Any, *, key: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}")
    try:
        return int(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}") from exc


def _as_float(value: Any, *, key: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}") from exc


def _require(value: Any, *, key: str) -> Any:
    if value is None:
        raise RuntimeError(f"{key} が未設定です（同梱 default_config.yaml を確認してください）")
    return value


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    import yaml  # type: ignore[import-untyped]

    try:
        data = yaml.safe_load(text)
    except Exception as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")

    return dict(data)


def _load_yaml_config(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    return _load_yaml_text(text, source=str(path))


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱デフォルト config をロードして dict を返す。"""

    try:
        blob = (
            resources.files("shadowquad")
            .joinpath("resource", "default_config.yaml")
            .read_text(encoding="utf-8")
        )
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "同梱 default_config.yaml の読み込みに失敗しました"
            "（パッケージ配布物の package-data を確認してください）"
        ) from exc

    return _load_yaml_text(blob, source="shadowquad/resource/default_config.yaml")


def _merge_sections(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """トップレベルのセクション単位で上書きする（セクション内はキー単位で後勝ち）。"""

    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            merged = dict(out[key])
            merged.update(value)
            out[key] = merged
        else:
            out[key] = value
    return out


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。"""

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")

    discovered_path: Path | None = None
    for p in _default_config_candidates():
        if p.is_file():
            discovered_path = p
            break

    payload = _load_packaged_default_config()
    if discovered_path is not None:
        payload = _merge_sections(payload, _load_yaml_config(discovered_path))
    if explicit_path is not None:
        payload = _merge_sections(payload, _load_yaml_config(explicit_path))

    version = _as_int(_require(payload.get("version"), key="version"), key="version")
    if version != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version}")

    paths = _as_mapping(payload.get("paths"), key="paths")
    output_dir = _require(_as_optional_path(paths.get("output_dir")), key="paths.output_dir")

    scene = _as_mapping(payload.get("scene"), key="scene")
    polygon_count = _require(
        _as_int(scene.get("polygon_count"), key="scene.polygon_count"),
        key="scene.polygon_count",
    )
    sample_count = _require(
        _as_int(scene.get("sample_count"), key="scene.sample_count"),
        key="scene.sample_count",
    )
    radius = _require(_as_float(scene.get("radius"), key="scene.radius"), key="scene.radius")
    if polygon_count < 0:
        raise ValueError(f"scene.polygon_count は 0 以上である必要があります: got={polygon_count}")
    if radius < 0:
        raise ValueError(f"scene.radius は非負である必要があります: got={radius}")

    shadow = _as_mapping(payload.get("shadow"), key="shadow")
    extrusion_length = _require(
        _as_float(shadow.get("extrusion_length"), key="shadow.extrusion_length"),
        key="shadow.extrusion_length",
    )
    if extrusion_length < 0:
        raise ValueError(
            f"shadow.extrusion_length は非負である必要があります: got={extrusion_length}"
        )
    smooth_threshold = _require(
        _as_float(shadow.get("smooth_threshold"), key="shadow.smooth_threshold"),
        key="shadow.smooth_threshold",
    )
    if not 0.0 <= smooth_threshold <= 0.5:
        raise ValueError(
            f"shadow.smooth_threshold は [0, 0.5] の範囲である必要があります: got={smooth_threshold}"
        )
    light_size = _require(
        _as_float(shadow.get("light_size"), key="shadow.light_size"),
        key="shadow.light_size",
    )
    if light_size < 0:
        raise ValueError(f"shadow.light_size は非負である必要があります: got={light_size}")

    export = _as_mapping(payload.get("export"), key="export")
    canvas_size = _require(
        _as_int_pair(export.get("canvas_size"), key="export.canvas_size"),
        key="export.canvas_size",
    )
    if canvas_size[0] <= 0 or canvas_size[1] <= 0:
        raise ValueError(f"export.canvas_size は正の値である必要があります: got={canvas_size}")
    view_size = _require(
        _as_float(export.get("view_size"), key="export.view_size"),
        key="export.view_size",
    )
    if view_size <= 0:
        raise ValueError(f"export.view_size は正の値である必要があります: got={view_size}")

    cfg = RuntimeConfig(
        config_path=explicit_path or discovered_path,
        output_dir=output_dir,
        polygon_count=int(polygon_count),
        sample_count=int(sample_count),
        radius=float(radius),
        extrusion_length=float(extrusion_length),
        smooth_threshold=float(smooth_threshold),
        light_size=float(light_size),
        canvas_size=canvas_size,
        view_size=float(view_size),
    )
    _CONFIG_CACHE = cfg
    return cfg


def output_root_dir() -> Path:
    """出力ファイルを保存する既定ルートディレクトリを返す。

    上書き順（後勝ち）:
    1) 同梱 default_config.yaml
    2) `./.shadowquad/config.yaml` / `~/.config/shadowquad/config.yaml`
    3) `set_config_path()` / CLI `--config` で指定したパス
    """

    cfg = runtime_config()
    return Path(cfg.output_dir)


__all__ = ["RuntimeConfig", "output_root_dir", "runtime_config", "set_config_path"]
