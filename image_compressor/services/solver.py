from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from image_compressor.core.errors import ConfigError, EncodeTimeoutError
from image_compressor.core.logging import configure_logging
from image_compressor.models.compress import EncodeAttempt

logger = configure_logging()

AttemptFn = Callable[[int], EncodeAttempt]


@dataclass(frozen=True)
class SolverOutcome:
    attempts: tuple[EncodeAttempt, ...]
    target_met: bool

    @property
    def final(self) -> EncodeAttempt:
        return self.attempts[-1]

    @property
    def quality_trail(self) -> tuple[int, ...]:
        return tuple(attempt.quality_used for attempt in self.attempts)


class SizeConstraintSolver:
    """
    البحث عن جودة ترميز تجعل الملف الناتج ضمن الحجم المطلوب.

    كل محاولة تُنفَّذ عبر دالة ``attempt(quality)`` تكتب إلى نفس مسار الإخراج،
    فتبقى نتيجة واحدة فقط. تنخفض الجودة بمقدار ``step`` في كل دورة حتى
    ``floor``، ويتوقف البحث عند بلوغ الحد الأدنى بدل تكرار ترميز مطابق.
    """

    def __init__(self, *, max_attempts: int = 10, floor: int = 10, step: int = 10) -> None:
        if max_attempts < 1 or step < 1 or not 1 <= floor <= 100:
            raise ConfigError("إعدادات البحث عن الجودة غير صالحة.")
        self.max_attempts = max_attempts
        self.floor = floor
        self.step = step

    def clamp(self, quality: int) -> int:
        return max(self.floor, min(100, quality))

    def solve(
        self,
        attempt: AttemptFn,
        quality: int,
        target_size_bytes: Optional[int] = None,
        *,
        deadline: Optional[float] = None,
    ) -> SolverOutcome:
        if target_size_bytes is not None and target_size_bytes <= 0:
            raise ConfigError("الحجم المستهدف غير صالح.", details="target_size_bytes يجب أن يكون موجبًا.")

        current = self.clamp(quality)
        if target_size_bytes is None:
            return SolverOutcome(attempts=(attempt(current),), target_met=True)

        attempts: List[EncodeAttempt] = []
        while True:
            result = attempt(current)
            attempts.append(result)
            logger.debug("محاولة %d بجودة %d أنتجت %d بايت", len(attempts), current, result.byte_size)

            if result.byte_size <= target_size_bytes:
                return SolverOutcome(attempts=tuple(attempts), target_met=True)
            if len(attempts) >= self.max_attempts:
                break

            next_quality = max(self.floor, current - self.step)
            if next_quality == current:
                break

            if deadline is not None and time.monotonic() >= deadline:
                raise EncodeTimeoutError(
                    "انتهت المهلة قبل الوصول إلى الحجم المطلوب.",
                    details=f"توقف البحث بعد {len(attempts)} محاولة.",
                )
            current = next_quality

        logger.info(
            "لم يتحقق الحجم المستهدف (%d بايت) بعد %d محاولة، آخر حجم %d بايت",
            target_size_bytes,
            len(attempts),
            attempts[-1].byte_size,
        )
        return SolverOutcome(attempts=tuple(attempts), target_met=False)
