from __future__ import annotations

import threading
import time
from functools import partial
from pathlib import Path

from image_compressor.core.config import Settings, get_settings
from image_compressor.core.errors import CapacityError, DecodeError, TargetNotMetError
from image_compressor.core.logging import configure_logging
from image_compressor.models.compress import CompressionRequest, CompressionResult, DimensionPlan, EncodeAttempt
from image_compressor.services.dimensions import plan_dimensions
from image_compressor.services.imaging import ImagingBackend, PillowBackend
from image_compressor.services.pipeline import encode_once
from image_compressor.services.profiles import build_profile
from image_compressor.services.solver import SizeConstraintSolver

logger = configure_logging()


class CompressionService:
    """ضغط الصور وفق الصيغة والجودة والأبعاد والحجم المستهدف باستخدام قدرات صور قابلة للحقن."""

    def __init__(
        self,
        backend: ImagingBackend | None = None,
        *,
        settings: Settings | None = None,
        solver: SizeConstraintSolver | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.backend = backend or PillowBackend()
        self.solver = solver or SizeConstraintSolver(
            max_attempts=settings.max_attempts,
            floor=settings.quality_floor,
            step=settings.quality_step,
        )
        self.deliver_oversized = settings.deliver_oversized_results
        self.timeout_seconds = settings.encode_timeout_seconds
        self.admission_timeout = settings.admission_timeout_seconds
        self._slots = threading.BoundedSemaphore(max(1, settings.max_concurrent_encodes))

    # ------------------------------------------------------------------
    def compress(self, request: CompressionRequest, output_path: Path) -> CompressionResult:
        # التحقق من الصيغة والجودة قبل أي عمل على الملفات
        build_profile(request.format, self.solver.clamp(request.quality))

        if not self._slots.acquire(timeout=self.admission_timeout):
            raise CapacityError("الخادم مشغول بعمليات ضغط أخرى، حاول لاحقًا.")
        try:
            return self._compress(request, output_path)
        finally:
            self._slots.release()

    def _compress(self, request: CompressionRequest, output_path: Path) -> CompressionResult:
        deadline = time.monotonic() + self.timeout_seconds if self.timeout_seconds else None

        source = self.backend.read_dimensions(request.source_path)
        plan = plan_dimensions(source, request.max_width, request.max_height)
        original_bytes = self._original_size(request.source_path)

        attempt = partial(self._attempt, request, plan, output_path)
        outcome = self.solver.solve(attempt, request.quality, request.target_size_bytes, deadline=deadline)
        final = outcome.final

        result = CompressionResult(
            output_path=final.output_path,
            format=request.format,
            width=plan.width,
            height=plan.height,
            final_quality=final.quality_used,
            original_bytes=original_bytes,
            compressed_bytes=final.byte_size,
            attempts_used=len(outcome.attempts),
            target_met=outcome.target_met,
            quality_trail=outcome.quality_trail,
        )

        logger.info(
            "تم الضغط: %dx%d -> %dx%d بصيغة %s، جودة %d، %d محاولة",
            source.width,
            source.height,
            plan.width,
            plan.height,
            request.format.value,
            result.final_quality,
            result.attempts_used,
        )

        if not result.target_met and not self.deliver_oversized:
            raise TargetNotMetError(
                "تعذر الوصول إلى الحجم المطلوب.",
                details=f"أصغر حجم تم الوصول إليه {result.compressed_bytes} بايت بجودة {result.final_quality}.",
            )
        return result

    def _attempt(
        self,
        request: CompressionRequest,
        plan: DimensionPlan,
        output_path: Path,
        quality: int,
    ) -> EncodeAttempt:
        profile = build_profile(request.format, quality)
        return encode_once(self.backend, request.source_path, plan, profile, output_path)

    @staticmethod
    def _original_size(path: Path) -> int:
        try:
            return path.stat().st_size
        except OSError as exc:
            raise DecodeError("الملف المصدر غير متاح.", details=str(exc)) from exc

