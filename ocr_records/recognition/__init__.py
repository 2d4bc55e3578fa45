"""OCR engine module."""

from ocr_records.config import get_settings
from ocr_records.recognition.base import Recognizer
from ocr_records.recognition.languages import SUPPORTED_LANGUAGES


def get_recognizer(settings=None) -> Recognizer:
    """Build the recognizer selected by RECOGNITION_ENGINE."""
    settings = settings or get_settings()
    config = settings.recognition

    if config.engine == "vision":
        from ocr_records.recognition.vision import VisionRecognizer
        return VisionRecognizer(config)

    from ocr_records.recognition.tesseract import TesseractRecognizer
    return TesseractRecognizer(config)


__all__ = ["Recognizer", "SUPPORTED_LANGUAGES", "get_recognizer"]
