from __future__ import annotations

import math
from typing import Optional

from image_compressor.core.errors import ConfigError
from image_compressor.models.compress import DimensionPlan, ImageDimensions


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def plan_dimensions(
    source: ImageDimensions,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
) -> DimensionPlan:
    """
    حساب أبعاد الإخراج وفق سياسة "الاحتواء": تصغير الصورة لتدخل ضمن الحدود
    مع الحفاظ على نسبة العرض إلى الارتفاع ودون تكبير أبدًا.
    """
    for name, bound in (("max_width", max_width), ("max_height", max_height)):
        if bound is not None and bound <= 0:
            raise ConfigError("حدود الأبعاد غير صالحة.", details=f"{name} يجب أن يكون موجبًا.")

    if max_width is None and max_height is None:
        return DimensionPlan(source.width, source.height)

    max_w = max_width or source.width
    max_h = max_height or source.height
    if source.fits_within(max_w, max_h):
        return DimensionPlan(source.width, source.height)

    ratio = min(max_w / source.width, max_h / source.height)
    if ratio >= 1:
        return DimensionPlan(source.width, source.height)

    width = min(source.width, max(1, _round_half_up(source.width * ratio)))
    height = min(source.height, max(1, _round_half_up(source.height * ratio)))
    return DimensionPlan(width, height)
