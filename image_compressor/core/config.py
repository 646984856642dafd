import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """إعدادات خدمة ضغط الصور مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Image Compressor API"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    storage_dir: Optional[Path] = None
    uploads_dir: Optional[Path] = None
    compressed_dir: Optional[Path] = None

    # حدود الرفع (تُطبق قبل تسليم الملف لخط الضغط)
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_extensions: list[str] = Field(default_factory=lambda: ["jpeg", "jpg", "png", "gif", "webp"])

    # معاملات خط الضغط
    default_quality: int = 80
    default_format: str = "jpeg"
    max_attempts: int = 10
    quality_floor: int = 10
    quality_step: int = 10
    deliver_oversized_results: bool = True

    # حد التشغيل المتزامن لعمليات الترميز الثقيلة
    max_concurrent_encodes: int = Field(default_factory=lambda: os.cpu_count() or 2)
    admission_timeout_seconds: float = 30.0
    encode_timeout_seconds: Optional[float] = 60.0

    allow_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    allow_credentials: bool = True

    def configure_paths(self) -> None:
        """تهيئة المسارات الافتراضية وإنشاء المجلدات في حال غيابها."""
        self.storage_dir = (self.storage_dir or self.base_dir).resolve()
        self.uploads_dir = (self.uploads_dir or (self.storage_dir / "uploads")).resolve()
        self.compressed_dir = (self.compressed_dir or (self.storage_dir / "compressed")).resolve()

        for directory in (self.storage_dir, self.uploads_dir, self.compressed_dir):
            directory.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
