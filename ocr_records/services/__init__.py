"""Application services wired from settings and injectable collaborators."""

from dataclasses import dataclass

from ocr_records.config import get_settings
from ocr_records.preprocessing import PreprocessingPipeline
from ocr_records.recognition import Recognizer, get_recognizer
from ocr_records.services.pipeline import UploadPipeline
from ocr_records.services.records import RecordService
from ocr_records.storage import ImageStorage, RecordStore, create_record_store


@dataclass
class Services:
    """Everything a request handler needs, built once per process."""
    store: RecordStore
    images: ImageStorage
    recognizer: Recognizer
    pipeline: UploadPipeline
    records: RecordService

    @classmethod
    def build(
        cls,
        settings=None,
        store: RecordStore = None,
        recognizer: Recognizer = None,
        preprocessor: PreprocessingPipeline = None
    ) -> "Services":
        """Build services, creating any collaborator not passed in."""
        settings = settings or get_settings()
        store = store or create_record_store(settings)
        recognizer = recognizer or get_recognizer(settings)
        images = ImageStorage(settings)

        return cls(
            store=store,
            images=images,
            recognizer=recognizer,
            pipeline=UploadPipeline(store, images, recognizer, preprocessor, settings),
            records=RecordService(store, images),
        )


__all__ = ["Services", "UploadPipeline", "RecordService"]
