from pathlib import Path
from typing import IO, Optional
from uuid import uuid4

from fastapi import HTTPException, UploadFile, status

from image_compressor.core.config import get_settings

CHUNK_SIZE = 1024 * 1024


class LocalStorage:
    """خدمات التخزين المحلية للصور المرفوعة ومجلد نتائج الضغط."""

    def __init__(
        self,
        uploads_dir: Optional[Path] = None,
        compressed_dir: Optional[Path] = None,
        max_upload_bytes: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.uploads_dir = Path(uploads_dir or settings.uploads_dir)
        self.compressed_dir = Path(compressed_dir or settings.compressed_dir)
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_bytes

        for directory in (self.uploads_dir, self.compressed_dir):
            directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _generate_filename(suffix: str) -> str:
        suffix = suffix if suffix.startswith(".") else f".{suffix.lstrip('.')}"
        return f"{uuid4().hex}{suffix}"

    def save_upload(self, upload: UploadFile) -> Path:
        suffix = Path(upload.filename or "").suffix.lower() or ".bin"
        upload.file.seek(0)
        return self._save_stream(upload.file, suffix=suffix, directory=self.uploads_dir)

    def _save_stream(self, stream: IO[bytes], *, suffix: str, directory: Path) -> Path:
        target_path = directory / self._generate_filename(suffix)
        written = 0
        with target_path.open("wb") as buffer:
            while chunk := stream.read(CHUNK_SIZE):
                written += len(chunk)
                if written > self.max_upload_bytes:
                    break
                buffer.write(chunk)

        if written > self.max_upload_bytes:
            target_path.unlink(missing_ok=True)
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"حجم الملف كبير جدًا. الحد الأقصى {limit_mb}MB.",
            )
        return target_path
