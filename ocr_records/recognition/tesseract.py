"""
Tesseract OCR engine via pytesseract.
"""

import time
from pathlib import Path
from typing import Union

import pytesseract
from PIL import Image, UnidentifiedImageError
import structlog

from ocr_records.config import get_settings
from ocr_records.errors import RecognitionError
from ocr_records.observability.metrics import get_metrics
from ocr_records.recognition.base import Recognizer

logger = structlog.get_logger(__name__)


class TesseractRecognizer(Recognizer):
    """Local Tesseract engine."""

    name = "tesseract"

    def __init__(self, config=None):
        """
        Args:
            config: RecognitionSettings instance (uses default if not provided)
        """
        self.settings = config or get_settings().recognition
        if self.settings.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.settings.tesseract_cmd

    def is_available(self) -> bool:
        try:
            pytesseract.get_tesseract_version()
            return True
        except pytesseract.TesseractNotFoundError:
            return False

    def recognize(self, image_path: Union[str, Path], language: str) -> str:
        logger.info("recognition_start", engine=self.name, language=language)
        start_time = time.time()

        try:
            with Image.open(image_path) as image:
                text = pytesseract.image_to_string(
                    image,
                    lang=language,
                    timeout=self.settings.timeout_seconds
                )
        except pytesseract.TesseractNotFoundError as e:
            raise RecognitionError(f"Tesseract is not installed: {e}", engine=self.name)
        except pytesseract.TesseractError as e:
            raise RecognitionError(
                f"Tesseract failed: {e.message}",
                engine=self.name,
                details={"status": e.status, "language": language}
            )
        except RuntimeError as e:
            # pytesseract signals timeouts with a bare RuntimeError
            raise RecognitionError(f"Tesseract failed: {e}", engine=self.name)
        except (UnidentifiedImageError, OSError) as e:
            raise RecognitionError(f"Failed to read image for OCR: {e}", engine=self.name)

        elapsed = time.time() - start_time
        get_metrics().record_recognition(self.name, elapsed, len(text))
        logger.info(
            "recognition_complete",
            engine=self.name,
            elapsed_seconds=round(elapsed, 3),
            text_length=len(text),
            preview=text[:100]
        )
        return text
