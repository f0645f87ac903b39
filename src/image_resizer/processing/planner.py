"""目标尺寸计算。"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from image_resizer.core.exceptions import InvalidDimensionError, MissingDimensionError


def round_half_away_from_zero(value: float) -> int:
    """四舍五入（.5 远离零），不同于内置 round 的银行家舍入。"""

    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def plan_dimensions(
    original: Tuple[int, int],
    width: Optional[int],
    height: Optional[int],
    keep_aspect_ratio: bool,
) -> Tuple[int, int]:
    """根据原始尺寸与请求参数计算目标宽高。

    保持宽高比时以宽度优先，另一边按比例换算；自由模式下缺省的边沿用原始值。
    结果为 0 不在此处拦截，由缩放阶段统一处理。
    """

    orig_w, orig_h = original
    if orig_w <= 0 or orig_h <= 0:
        raise InvalidDimensionError(f"原始尺寸无效: {orig_w}x{orig_h}")

    if not keep_aspect_ratio:
        return (
            width if width is not None else orig_w,
            height if height is not None else orig_h,
        )

    if width is not None:
        return width, round_half_away_from_zero(width * orig_h / orig_w)
    if height is not None:
        return round_half_away_from_zero(height * orig_w / orig_h), height

    raise MissingDimensionError("保持宽高比时必须提供宽度或高度。")
