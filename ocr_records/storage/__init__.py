"""Record and image storage module."""

from ocr_records.storage.images import ImageStorage, StoredImage
from ocr_records.storage.records import Record
from ocr_records.storage.store import (
    RecordStore,
    RedisRecordStore,
    MemoryRecordStore,
    create_record_store,
)

__all__ = [
    "ImageStorage",
    "StoredImage",
    "Record",
    "RecordStore",
    "RedisRecordStore",
    "MemoryRecordStore",
    "create_record_store",
]
