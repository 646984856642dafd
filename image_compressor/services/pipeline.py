from __future__ import annotations

from pathlib import Path

from image_compressor.core.errors import EncodeError
from image_compressor.models.compress import DimensionPlan, EncodeAttempt
from image_compressor.services.imaging import ImagingBackend
from image_compressor.services.profiles import EncodingProfile


def encode_once(
    backend: ImagingBackend,
    source_path: Path,
    plan: DimensionPlan,
    profile: EncodingProfile,
    output_path: Path,
) -> EncodeAttempt:
    """ترميز محاولة واحدة إلى output_path (مع الكتابة فوق أي محتوى سابق) وإرجاع حجمها."""
    backend.render(source_path, plan, profile, output_path)

    try:
        byte_size = output_path.stat().st_size
    except OSError as exc:
        raise EncodeError("لم يُكتب ملف الإخراج.", details=str(exc)) from exc

    return EncodeAttempt(quality_used=profile.quality, output_path=output_path, byte_size=byte_size)
