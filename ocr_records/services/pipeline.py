"""
Upload pipeline: validate -> store raw upload -> preprocess -> recognize -> persist.
"""

import time
from pathlib import Path
from typing import Optional

import structlog

from ocr_records.config import get_settings
from ocr_records.errors import (
    ImageTooLargeError,
    MissingImageError,
    OCRRecordsError,
    ProcessingError,
    UnsupportedFormatError,
)
from ocr_records.observability.metrics import get_metrics
from ocr_records.preprocessing import PreprocessingPipeline
from ocr_records.recognition.base import Recognizer
from ocr_records.storage import ImageStorage, Record, RecordStore

logger = structlog.get_logger(__name__)

# Extensions and legacy MIME subtypes that name the same format
_FORMAT_ALIASES = {
    "jpg": "jpeg",
    "pjpeg": "jpeg",
    "tif": "tiff",
    "x-tiff": "tiff",
    "x-png": "png",
    "x-ms-bmp": "bmp",
    "x-bmp": "bmp",
}


def _canonical_format(name: str) -> str:
    return _FORMAT_ALIASES.get(name, name)


class UploadPipeline:
    """
    Turns one uploaded image into one saved record.

    Validation happens before anything is written. Once the raw upload is on
    disk, any later failure removes it again; the preprocessed temp file is
    always removed. Nothing is retried.
    """

    def __init__(
        self,
        store: RecordStore,
        images: ImageStorage,
        recognizer: Recognizer,
        preprocessor: PreprocessingPipeline = None,
        settings=None
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.images = images
        self.recognizer = recognizer
        self.preprocessor = preprocessor or PreprocessingPipeline(self.settings.preprocessing)

    def validate(
        self,
        content: Optional[bytes],
        filename: Optional[str],
        content_type: Optional[str] = None
    ) -> str:
        """
        Check an upload against the allow-list and size limit.

        Returns:
            The lowercased file extension without the dot

        Raises:
            ValidationError subclass describing the first problem found
        """
        if not content or not filename:
            raise MissingImageError()

        allowed = self.settings.allowed_extensions
        extension = Path(filename).suffix.lower().lstrip(".")
        if extension not in allowed:
            raise UnsupportedFormatError(extension or filename, allowed)

        if content_type is not None:
            mime = content_type.split(";", 1)[0].strip().lower()
            kind, _, subtype = mime.partition("/")
            accepted = {_canonical_format(ext) for ext in allowed}
            if kind != "image" or _canonical_format(subtype) not in accepted:
                raise UnsupportedFormatError(mime, allowed)

        if len(content) > self.settings.max_upload_size_bytes:
            raise ImageTooLargeError(len(content), self.settings.max_upload_size_bytes)

        return extension

    def handle_upload(
        self,
        content: Optional[bytes],
        filename: Optional[str],
        content_type: Optional[str] = None,
        language: Optional[str] = None
    ) -> Record:
        """
        Validate, process and persist an uploaded image.

        Args:
            content: Raw image bytes
            filename: Client-declared filename (only its extension is used)
            content_type: Client-declared MIME type, if any
            language: OCR language code (default from settings)

        Returns:
            The saved Record
        """
        language = (language or "").strip() or self.settings.default_language
        metrics = get_metrics()
        start_time = time.time()

        try:
            extension = self.validate(content, filename, content_type)
        except OCRRecordsError as e:
            metrics.record_error(type(e).__name__)
            metrics.record_upload(language, "rejected", time.time() - start_time)
            logger.info("upload_rejected", filename=filename, reason=e.message)
            raise

        logger.info("upload_received", filename=filename, size_bytes=len(content), language=language)

        raw = None
        processed_path = self.images.temp_path()
        stage = "store_upload"

        try:
            raw = self.images.save_upload(content, extension)

            stage = "preprocessing"
            self.preprocessor.process_file(raw.path, processed_path)

            stage = "recognition"
            text = self.recognizer.recognize(processed_path, language)

            stage = "persistence"
            record = Record(
                image_url=raw.url,
                extracted_text=text.strip(),
                language=language
            )
            self.store.insert(record)

        except Exception as e:
            if raw is not None:
                self.images.remove(raw.path)

            metrics.record_error(type(e).__name__)
            metrics.record_upload(language, "failed", time.time() - start_time)
            logger.error("upload_failed", stage=stage, error=str(e), error_type=type(e).__name__)

            if isinstance(e, OCRRecordsError):
                raise
            raise ProcessingError(f"{stage} failed: {e}", {"stage": stage}) from e

        finally:
            self.images.remove(processed_path)

        duration = time.time() - start_time
        metrics.record_upload(language, "success", duration)
        logger.info(
            "record_saved",
            id=record.id,
            image_url=record.image_url,
            chars=len(record.extracted_text),
            time_ms=round(duration * 1000, 2)
        )
        return record
