import re
from pathlib import Path
from typing import Iterable, Optional

from fastapi import HTTPException, UploadFile, status

from image_compressor.core.errors import ConfigError
from image_compressor.models.compress import ImageFormat


def ensure_image(upload: UploadFile, allowed_extensions: Iterable[str]) -> None:
    """التحقق من أن الملف المرفوع صورة من الأنواع المسموحة (الامتداد ونوع MIME معًا)."""
    allowed = "|".join(re.escape(ext.lower()) for ext in allowed_extensions)
    pattern = re.compile(allowed) if allowed else None

    extension = Path(upload.filename or "").suffix.lower().lstrip(".")
    content_type = (upload.content_type or "").lower()

    if not pattern or not pattern.fullmatch(extension) or not pattern.search(content_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"يُسمح بملفات الصور فقط ({', '.join(allowed_extensions)}).",
        )


def parse_optional_int(value: Optional[str], field_name: str, *, multiplier: int = 1) -> Optional[int]:
    """تحويل قيمة نموذج اختيارية إلى عدد صحيح؛ القيمة الفارغة تعني عدم التحديد."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text) * multiplier
    except ValueError:
        raise ConfigError("قيمة غير صالحة في الطلب.", details=f"{field_name} يجب أن يكون عددًا صحيحًا.") from None


def download_name(original_name: Optional[str], image_format: ImageFormat) -> str:
    stem = Path(original_name or "image").stem or "image"
    return f"compressed-{stem}.{image_format.extension}"
