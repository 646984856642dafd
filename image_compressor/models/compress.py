from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from image_compressor.core.errors import ConfigError


class ImageFormat(str, Enum):
    jpeg = "jpeg"
    png = "png"
    webp = "webp"

    @classmethod
    def parse(cls, value: "ImageFormat | str | None") -> "ImageFormat":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        if normalized == "jpg":
            normalized = "jpeg"
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            raise ConfigError(
                "صيغة الإخراج غير مدعومة.",
                details=f"'{value}' ليست من الصيغ المتاحة: {supported}.",
            ) from None

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.jpeg else self.value

    @property
    def pillow_name(self) -> str:
        return self.value.upper()

    @property
    def media_type(self) -> str:
        return f"image/{self.value}"


@dataclass(frozen=True)
class ImageDimensions:
    width: int
    height: int

    def fits_within(self, max_width: int, max_height: int) -> bool:
        return self.width <= max_width and self.height <= max_height


# الأبعاد المخططة لها نفس الشكل، والاسم المستقل يوضح مصدرها في التوقيعات
DimensionPlan = ImageDimensions


def _require_positive(name: str, value: Optional[int]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError("قيمة غير صالحة في الطلب.", details=f"{name} يجب أن يكون عددًا صحيحًا موجبًا.")


def validate_options(
    quality: int,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
    target_size_bytes: Optional[int] = None,
) -> None:
    if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
        raise ConfigError("قيمة الجودة غير صالحة.", details="quality يجب أن تكون بين 1 و 100.")
    _require_positive("max_width", max_width)
    _require_positive("max_height", max_height)
    _require_positive("target_size_bytes", target_size_bytes)


@dataclass(frozen=True)
class CompressionRequest:
    """طلب ضغط واحد، يتم التحقق من جميع حقوله مرة واحدة عند الإنشاء."""

    source_path: Path
    quality: int = 80
    format: ImageFormat = ImageFormat.jpeg
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    target_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "source_path", Path(self.source_path))
        object.__setattr__(self, "format", ImageFormat.parse(self.format))
        validate_options(self.quality, self.max_width, self.max_height, self.target_size_bytes)


@dataclass(frozen=True)
class EncodeAttempt:
    quality_used: int
    output_path: Path
    byte_size: int


@dataclass(frozen=True)
class CompressionResult:
    output_path: Path
    format: ImageFormat
    width: int
    height: int
    final_quality: int
    original_bytes: int
    compressed_bytes: int
    attempts_used: int
    target_met: bool
    quality_trail: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def reduction_percent(self) -> float:
        if not self.original_bytes:
            return 0.0
        return round((1 - self.compressed_bytes / self.original_bytes) * 100, 2)

    def to_headers(self) -> dict[str, str]:
        return {
            "X-Original-Size": str(self.original_bytes),
            "X-Compressed-Size": str(self.compressed_bytes),
            "X-Final-Quality": str(self.final_quality),
            "X-Attempts": str(self.attempts_used),
            "X-Target-Met": "true" if self.target_met else "false",
            "X-Output-Width": str(self.width),
            "X-Output-Height": str(self.height),
        }
