from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from image_compressor.core.errors import DecodeError, EncodeError
from image_compressor.models.compress import DimensionPlan, ImageDimensions, ImageFormat
from image_compressor.services.profiles import EncodingProfile

_DECODE_FAILURES = (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError)


class ImagingBackend(ABC):
    """واجهة قدرات الصور التي يعتمد عليها خط الضغط: قراءة الأبعاد، التحجيم، والترميز."""

    @abstractmethod
    def read_dimensions(self, source_path: Path) -> ImageDimensions:
        """إرجاع أبعاد الصورة الأصلية أو رفع DecodeError."""

    @abstractmethod
    def render(self, source_path: Path, plan: DimensionPlan, profile: EncodingProfile, output_path: Path) -> None:
        """كتابة ملف واحد في output_path بالأبعاد والمعاملات المطلوبة."""


class PillowBackend(ImagingBackend):
    """تنفيذ قدرات الصور باستخدام Pillow."""

    resample = Image.Resampling.LANCZOS

    def read_dimensions(self, source_path: Path) -> ImageDimensions:
        try:
            with Image.open(source_path) as image:
                width, height = image.size
        except FileNotFoundError as exc:
            raise DecodeError("الملف المصدر غير موجود.", details=str(source_path)) from exc
        except _DECODE_FAILURES as exc:
            raise DecodeError("تعذر قراءة الملف كصورة.", details=str(exc)) from exc
        return ImageDimensions(width=width, height=height)

    def render(self, source_path: Path, plan: DimensionPlan, profile: EncodingProfile, output_path: Path) -> None:
        try:
            with Image.open(source_path) as source:
                source.load()
                image = source.copy()
        except _DECODE_FAILURES as exc:
            raise DecodeError("تعذر قراءة الملف كصورة.", details=str(exc)) from exc

        try:
            has_alpha = self._has_alpha(image)
            image = self._working_copy(image, profile, has_alpha)
            if image.size != (plan.width, plan.height):
                image = image.resize((plan.width, plan.height), self.resample)
            image = self._finalize(image, profile, has_alpha)
            image.save(output_path, format=profile.format.pillow_name, **self._save_options(profile))
        except (OSError, ValueError, KeyError) as exc:
            raise EncodeError("فشل ترميز الصورة.", details=str(exc)) from exc

    # ------------------------------------------------------------------
    @staticmethod
    def _has_alpha(image: Image.Image) -> bool:
        return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)

    @staticmethod
    def _working_copy(image: Image.Image, profile: EncodingProfile, has_alpha: bool) -> Image.Image:
        # التحجيم يتم دائمًا بنمط ألوان كامل (RGB أو RGBA أو L)
        if has_alpha:
            return image.convert("RGBA")
        if image.mode == "L" and profile.format is ImageFormat.jpeg:
            return image
        return image if image.mode == "RGB" else image.convert("RGB")

    @staticmethod
    def _finalize(image: Image.Image, profile: EncodingProfile, has_alpha: bool) -> Image.Image:
        if profile.format is ImageFormat.jpeg and has_alpha:
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.getchannel("A"))
            return background
        if profile.format is ImageFormat.png:
            method = Image.Quantize.FASTOCTREE if has_alpha else Image.Quantize.MEDIANCUT
            return image.quantize(colors=profile.palette_colors, method=method)
        return image

    @staticmethod
    def _save_options(profile: EncodingProfile) -> dict:
        options = dict(profile.params)
        if profile.format is ImageFormat.png:
            # جودة PNG طُبقت مسبقًا عبر تقليص لوحة الألوان
            options.pop("quality", None)
        return options
