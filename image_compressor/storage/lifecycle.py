from __future__ import annotations

import threading
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from image_compressor.core.errors import LifecycleWarning
from image_compressor.core.logging import configure_logging

logger = configure_logging()


class ArtifactLifecycle:
    """
    إدارة الملفات المؤقتة لطلب ضغط واحد.

    يمتلك مسار الملف المصدر ويخصص مسار إخراج فريدًا داخل المجلد المحقون،
    ويضمن حذف كل منهما مرة واحدة فقط مهما كانت نهاية الطلب. عند الخروج من
    كتلة ``with`` تُحذف الملفات فورًا، إلا إذا نُقلت المسؤولية إلى طبقة
    النقل عبر ``hand_off()``، وحينها تستدعي الاستجابة ``release()`` بعد
    انتهاء الإرسال.

    فشل الحذف لا يُرفع كاستثناء؛ يُسجَّل كـ LifecycleWarning ويُعاد للمستدعي.
    """

    def __init__(self, source_path: Path, output_dir: Path) -> None:
        self.source_path = Path(source_path)
        self.output_dir = Path(output_dir)
        self.output_path: Optional[Path] = None
        self._handed_off = False
        self._released_source = False
        self._released_output = False
        self._lock = threading.Lock()

    def allocate_output(self, extension: str) -> Path:
        if self.output_path is None:
            extension = extension.lstrip(".")
            self.output_path = self.output_dir / f"compressed-{uuid4().hex}.{extension}"
        return self.output_path

    @property
    def handed_off(self) -> bool:
        return self._handed_off

    def hand_off(self) -> None:
        self._handed_off = True

    def release_source(self) -> Optional[LifecycleWarning]:
        with self._lock:
            if self._released_source:
                return None
            self._released_source = True
        return self._delete(self.source_path)

    def release_output(self) -> Optional[LifecycleWarning]:
        with self._lock:
            if self._released_output:
                return None
            self._released_output = True
        if self.output_path is None:
            return None
        return self._delete(self.output_path)

    def release(self) -> List[LifecycleWarning]:
        warnings = [self.release_source(), self.release_output()]
        return [warning for warning in warnings if warning is not None]

    def __enter__(self) -> "ArtifactLifecycle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None or not self._handed_off:
            self.release()

    @staticmethod
    def _delete(path: Path) -> Optional[LifecycleWarning]:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            warning = LifecycleWarning(path, str(exc))
            logger.warning("تعذر حذف الملف المؤقت %s", warning)
            return warning
        return None
