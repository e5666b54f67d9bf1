# どこで: `src/shadowquad/core/errors.py`。
# 何を: 幾何カーネル共通の例外型を定義する。
# なぜ: 「この影だけ今フレームは描かない」と呼び出し側が判断できる失敗を、通常の ValueError と区別するため。

from __future__ import annotations


class DegenerateGeometryError(ValueError):
    """退化した幾何（長さ 0 の方向ベクトル、頂点不足など）を表す。

    Notes
    -----
    ValueError のサブクラスなので、既存の ValueError ハンドラでも捕捉できる。
    """


__all__ = ["DegenerateGeometryError"]
