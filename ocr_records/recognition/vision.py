"""
Google Cloud Vision OCR engine.
"""

import json
import time
from pathlib import Path
from typing import Union

import structlog
from google.api_core import exceptions as google_exceptions
from google.cloud import vision
from google.cloud.vision_v1 import types
from google.oauth2 import service_account

from ocr_records.config import get_settings
from ocr_records.errors import RecognitionError
from ocr_records.observability.metrics import get_metrics
from ocr_records.recognition.base import Recognizer
from ocr_records.recognition.languages import to_bcp47

logger = structlog.get_logger(__name__)


class VisionRecognizer(Recognizer):
    """
    Google Cloud Vision engine using DOCUMENT_TEXT_DETECTION.

    Failed calls are not retried; the upload that triggered them fails.
    """

    name = "vision"

    def __init__(self, config=None):
        """
        Args:
            config: RecognitionSettings instance (uses default if not provided)
        """
        self.settings = config or get_settings().recognition
        self._client = None

    @property
    def client(self) -> vision.ImageAnnotatorClient:
        """Lazy-load Vision API client."""
        if self._client is None:
            if self.settings.google_credentials_json:
                try:
                    creds_dict = json.loads(self.settings.google_credentials_json)
                    credentials = service_account.Credentials.from_service_account_info(creds_dict)
                except (ValueError, KeyError) as e:
                    logger.error("failed_to_load_json_credentials", error=str(e))
                    raise RecognitionError(f"Failed to load credentials from JSON env: {e}", engine=self.name)
                self._client = vision.ImageAnnotatorClient(credentials=credentials)
                logger.info("vision_client_initialized_from_json_env")
            elif self.settings.google_application_credentials:
                self._client = vision.ImageAnnotatorClient.from_service_account_file(
                    self.settings.google_application_credentials
                )
                logger.info("vision_client_initialized_from_file")
            else:
                self._client = vision.ImageAnnotatorClient()
                logger.info("vision_client_initialized_default")
        return self._client

    def is_available(self) -> bool:
        try:
            self.client
            return True
        except Exception as e:
            logger.warning("vision_client_unavailable", error=str(e))
            return False

    def recognize(self, image_path: Union[str, Path], language: str) -> str:
        try:
            content = Path(image_path).read_bytes()
        except OSError as e:
            raise RecognitionError(f"Failed to read image for OCR: {e}", engine=self.name)

        hint = to_bcp47(language)
        image_context = types.ImageContext(language_hints=[hint]) if hint else None

        request = types.AnnotateImageRequest(
            image=types.Image(content=content),
            features=[types.Feature(type=vision.Feature.Type.DOCUMENT_TEXT_DETECTION)],
            image_context=image_context
        )

        logger.info("recognition_start", engine=self.name, language=language, hint=hint, image_size=len(content))
        start_time = time.time()

        try:
            response = self.client.annotate_image(request)
        except google_exceptions.PermissionDenied as e:
            raise RecognitionError(
                f"Permission denied. Ensure the Vision API is enabled and the service account has access. Error: {e}",
                engine=self.name,
                details={"status_code": 403}
            )
        except google_exceptions.GoogleAPIError as e:
            raise RecognitionError(
                str(e),
                engine=self.name,
                details={"status_code": getattr(e, "code", None)}
            )

        if response.error.message:
            raise RecognitionError(
                response.error.message,
                engine=self.name,
                details={"status_code": response.error.code}
            )

        text = response.full_text_annotation.text

        elapsed = time.time() - start_time
        get_metrics().record_recognition(self.name, elapsed, len(text))
        logger.info(
            "recognition_complete",
            engine=self.name,
            elapsed_seconds=round(elapsed, 3),
            text_length=len(text)
        )
        return text
