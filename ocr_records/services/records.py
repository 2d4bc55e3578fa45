"""
Record access: list, search, fetch and delete.
"""

from typing import List, Optional

import structlog

from ocr_records.errors import RecordNotFoundError
from ocr_records.observability.metrics import get_metrics
from ocr_records.storage import ImageStorage, Record, RecordStore

logger = structlog.get_logger(__name__)


class RecordService:
    """Read and delete operations over the record store."""

    def __init__(self, store: RecordStore, images: ImageStorage):
        self.store = store
        self.images = images

    def list_records(self, search: Optional[str] = None) -> List[Record]:
        """Records newest first, optionally filtered by extracted text."""
        records = self.store.list(search or None)
        logger.debug("records_listed", search=search, count=len(records))
        return records

    def get_record(self, record_id: str) -> Record:
        record = self.store.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    def delete_record(self, record_id: str) -> Record:
        """
        Delete a record and, best-effort, its backing image.

        Raises:
            RecordNotFoundError: if the record does not exist, including when
                a concurrent delete removed it first
        """
        record = self.get_record(record_id)

        self.images.remove(self.images.path_for_url(record.image_url))

        if not self.store.delete(record_id):
            raise RecordNotFoundError(record_id)

        get_metrics().record_delete()
        logger.info("record_deleted", id=record_id, image_url=record.image_url)
        return record
