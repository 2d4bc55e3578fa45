"""
Shared fixtures: temp storage dirs, in-memory store and recognizer doubles.
"""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image, ImageDraw
from fastapi.testclient import TestClient

from ocr_records.api.main import create_app
from ocr_records.config import Settings, StoreSettings
from ocr_records.errors import RecognitionError
from ocr_records.recognition.base import Recognizer
from ocr_records.services import Services
from ocr_records.storage import MemoryRecordStore


class FakeRecognizer(Recognizer):
    """Returns fixed text and remembers what it was asked to read."""

    name = "fake"

    def __init__(self, text: str = "  Hello World\n"):
        self.text = text
        self.calls = []

    def recognize(self, image_path, language):
        path = Path(image_path)
        self.calls.append({"path": path, "language": language, "existed": path.exists()})
        return self.text


class FailingRecognizer(Recognizer):
    """Always fails with the given exception."""

    name = "failing"

    def __init__(self, exc: Exception = None):
        self.exc = exc or RecognitionError("engine exploded", engine="failing")
        self.calls = []

    def recognize(self, image_path, language):
        self.calls.append(Path(image_path))
        raise self.exc

    def is_available(self) -> bool:
        return False


def make_image_bytes(fmt: str = "PNG", size=(240, 80), text: str = "Hello World") -> bytes:
    """Black text on a white background."""
    image = Image.new("RGB", size, "white")
    ImageDraw.Draw(image).text((10, 30), text, fill="black")
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_noise_png(side: int = 400, seed: int = 7) -> bytes:
    """Incompressible RGB noise, roughly side*side*3 bytes as PNG."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(side, side, 3), dtype=np.uint8)
    buffer = io.BytesIO()
    Image.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


def files_in(directory: Path) -> list:
    return sorted(p.name for p in Path(directory).iterdir() if p.is_file())


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        upload_dir=str(tmp_path / "uploads"),
        processing_dir=str(tmp_path / "processing"),
        store=StoreSettings(backend="memory"),
        log_format="console",
    )


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def services(settings, store, recognizer):
    return Services.build(settings, store=store, recognizer=recognizer)


@pytest.fixture
def png_bytes():
    return make_image_bytes()


@pytest.fixture
def make_client(settings, store):
    """Build a TestClient around the given recognizer."""

    def _make(recognizer: Recognizer = None) -> TestClient:
        app = create_app(settings, store=store, recognizer=recognizer or FakeRecognizer())
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, recognizer):
    return make_client(recognizer)
