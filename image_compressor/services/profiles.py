from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from image_compressor.core.errors import ConfigError
from image_compressor.models.compress import ImageFormat


@dataclass(frozen=True)
class EncodingProfile:
    """
    معاملات الترميز الخاصة بكل صيغة.

    في PNG لا تعني ``quality`` ضغطًا فاقدًا للبيانات، بل تتحكم بمدى تقليص
    لوحة الألوان قبل الحفظ: كلما انخفضت القيمة قلّ عدد الألوان المحتفَظ بها.
    """

    format: ImageFormat
    quality: int
    params: Mapping[str, object] = field(default_factory=dict)

    @property
    def palette_colors(self) -> int:
        return max(2, min(256, round(256 * self.quality / 100)))


def build_profile(image_format: ImageFormat | str, quality: int) -> EncodingProfile:
    image_format = ImageFormat.parse(image_format)
    if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
        raise ConfigError("قيمة الجودة غير صالحة.", details=f"quality={quality!r} خارج النطاق 1-100.")

    if image_format is ImageFormat.jpeg:
        params = {"quality": quality, "optimize": True}
    elif image_format is ImageFormat.png:
        params = {"quality": quality, "compress_level": 9}
    elif image_format is ImageFormat.webp:
        params = {"quality": quality}
    else:  # pragma: no cover - ImageFormat.parse يرفض أي قيمة أخرى
        raise ConfigError("صيغة الإخراج غير مدعومة.", details=str(image_format))

    return EncodingProfile(format=image_format, quality=quality, params=MappingProxyType(params))
