"""أنواع الأخطاء الخاصة بخط ضغط الصور.

كل نوع يحمل ``kind`` ثابتًا ورمز حالة HTTP حتى تتمكن طبقة النقل من التمييز
بينها دون فحص نص الرسالة.
"""

from __future__ import annotations


class CompressionError(Exception):
    kind = "compression_error"
    status_code = 500

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload = {"error": self.message, "kind": self.kind}
        if self.details:
            payload["details"] = self.details
        return payload


class ConfigError(CompressionError):
    """طلب غير صالح الشكل: صيغة غير مدعومة، حجم هدف غير موجب، أبعاد خاطئة."""

    kind = "config_error"
    status_code = 400


class DecodeError(CompressionError):
    """الملف المصدر لا يمكن قراءته كصورة."""

    kind = "decode_error"
    status_code = 422


class EncodeError(CompressionError):
    """فشل الترميز أو الكتابة على القرص أثناء محاولة واحدة."""

    kind = "encode_error"
    status_code = 500


class TargetNotMetError(CompressionError):
    kind = "target_not_met"
    status_code = 422


class CapacityError(CompressionError):
    kind = "capacity_exceeded"
    status_code = 503


class EncodeTimeoutError(CompressionError):
    kind = "timeout"
    status_code = 504


class LifecycleWarning(UserWarning):
    """فشل حذف ملف مؤقت. يُسجَّل فقط ولا يغيّر نتيجة الطلب."""

    def __init__(self, path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
