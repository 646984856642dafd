"""
Pytest-wide fixtures.

Storage must point at a throwaway directory before any module calls
``get_settings()``, so the environment is set at import time.
"""

import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

import pytest
from PIL import Image

os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="image-compressor-tests-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from image_compressor.core.config import Settings  # noqa: E402
from image_compressor.core.errors import EncodeError  # noqa: E402
from image_compressor.models.compress import DimensionPlan, ImageDimensions  # noqa: E402
from image_compressor.services.imaging import ImagingBackend  # noqa: E402
from image_compressor.services.profiles import EncodingProfile  # noqa: E402


class FakeBackend(ImagingBackend):
    """Deterministic imaging stand-in: output size is a function of quality."""

    def __init__(
        self,
        dimensions=(4000, 3000),
        size_for_quality: Callable[[int], int] = lambda q: q * 100,
        fail_on_quality: Optional[int] = None,
    ) -> None:
        self.dimensions = ImageDimensions(*dimensions)
        self.size_for_quality = size_for_quality
        self.fail_on_quality = fail_on_quality
        self.dimension_reads = 0
        self.renders: list[tuple[DimensionPlan, EncodingProfile]] = []

    def read_dimensions(self, source_path: Path) -> ImageDimensions:
        self.dimension_reads += 1
        return self.dimensions

    def render(self, source_path: Path, plan: DimensionPlan, profile: EncodingProfile, output_path: Path) -> None:
        self.renders.append((plan, profile))
        if profile.quality == self.fail_on_quality:
            raise EncodeError("boom")
        output_path.write_bytes(b"x" * self.size_for_quality(profile.quality))


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_settings(tmp_path):
    def _factory(**overrides) -> Settings:
        values = {"storage_dir": tmp_path, "encode_timeout_seconds": None}
        values.update(overrides)
        return Settings(**values)

    return _factory


@pytest.fixture
def source_file(tmp_path) -> Path:
    path = tmp_path / "source.jpg"
    path.write_bytes(b"\xff" * 50_000)
    return path


@pytest.fixture
def make_image(tmp_path):
    """Create a real image on disk; ``noisy`` images keep their size quality-dependent."""

    def _factory(
        name: str = "photo.png",
        size=(400, 300),
        mode: str = "RGB",
        noisy: bool = True,
        fmt: Optional[str] = None,
    ) -> Path:
        width, height = size
        if noisy:
            channels = len(mode)
            image = Image.frombytes(mode, size, os.urandom(width * height * channels))
        else:
            color = (120, 130, 140, 200)[: len(mode)]
            color = color if len(color) > 1 else color[0]
            image = Image.new(mode, size, color)
        path = tmp_path / name
        image.save(path, format=fmt)
        return path

    return _factory


@pytest.fixture
def backend_factory():
    return FakeBackend
