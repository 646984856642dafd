from __future__ import annotations

from starlette.responses import FileResponse
from starlette.types import Receive, Scope, Send

from image_compressor.core.logging import configure_logging
from image_compressor.storage.lifecycle import ArtifactLifecycle

logger = configure_logging()


class ArtifactFileResponse(FileResponse):
    """استجابة ملف تحرر الملفات المؤقتة بعد الإرسال، سواء نجح الإرسال أم انقطع."""

    def __init__(self, lifecycle: ArtifactLifecycle, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.lifecycle = lifecycle

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            warnings = self.lifecycle.release()
            if warnings:
                logger.warning("بقيت %d ملفات مؤقتة دون حذف بعد الإرسال", len(warnings))
