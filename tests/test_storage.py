"""
Tests for the record stores and image storage.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import redis
from pydantic import ValidationError

from ocr_records.config import StoreSettings
from ocr_records.errors import PersistenceError
from ocr_records.storage import ImageStorage, MemoryRecordStore, Record, RedisRecordStore

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_record(text: str, minutes: int = 0, **kwargs) -> Record:
    return Record(
        image_url=f"/uploads/{text.lower().replace(' ', '_') or 'blank'}.png",
        extracted_text=text,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        **kwargs
    )


@pytest.fixture
def populated_store():
    store = MemoryRecordStore()
    store.insert(make_record("Invoice TOTAL 42", minutes=1))
    store.insert(make_record("grocery list", minutes=3))
    store.insert(make_record("", minutes=2))
    store.insert(make_record("Total recall", minutes=0))
    return store


class TestRecord:
    def test_defaults(self):
        record = Record(image_url="/uploads/a.png")
        assert len(record.id) == 32
        assert record.extracted_text == ""
        assert record.language == "eng"
        assert record.created_at.tzinfo is not None

    def test_ids_are_unique(self):
        assert Record(image_url="/a").id != Record(image_url="/a").id

    def test_json_uses_camel_case(self):
        data = make_record("hi").model_dump(mode="json", by_alias=True)
        assert set(data) == {"id", "imageUrl", "extractedText", "language", "createdAt"}

    def test_records_are_immutable(self):
        record = make_record("hi")
        with pytest.raises(ValidationError):
            record.extracted_text = "changed"


class TestMemoryRecordStore:
    def test_list_is_newest_first(self, populated_store):
        records = populated_store.list()
        created = [r.created_at for r in records]
        assert created == sorted(created, reverse=True)
        assert len(set(created)) == len(created)

    def test_ties_keep_latest_insert_first(self):
        store = MemoryRecordStore()
        first = store.insert(make_record("first"))
        second = store.insert(make_record("second"))
        assert [r.id for r in store.list()] == [second.id, first.id]

    def test_search_is_case_insensitive_substring(self, populated_store):
        texts = [r.extracted_text for r in populated_store.list("total")]
        assert texts == ["Invoice TOTAL 42", "Total recall"]

    def test_search_is_subset_of_list(self, populated_store):
        everything = populated_store.list()
        expected = [r for r in everything if "cery" in r.extracted_text.lower()]
        assert populated_store.list("CERY") == expected

    def test_empty_search_equals_no_search(self, populated_store):
        assert populated_store.list("") == populated_store.list()

    def test_search_is_not_a_regex(self, populated_store):
        assert populated_store.list("T.tal") == []

    def test_get(self, populated_store):
        record = populated_store.list()[0]
        assert populated_store.get(record.id) == record
        assert populated_store.get("missing") is None

    def test_delete_twice(self, populated_store):
        record = populated_store.list()[0]
        assert populated_store.delete(record.id) is True
        assert populated_store.get(record.id) is None
        assert populated_store.delete(record.id) is False
        assert populated_store.count() == 3


class TestRedisRecordStore:
    def test_connection_errors_become_persistence_errors(self):
        client = MagicMock()
        client.zrevrange.side_effect = redis.ConnectionError("connection refused")
        store = RedisRecordStore(StoreSettings(), client=client)

        with pytest.raises(PersistenceError):
            store.list()

    def test_get_parses_stored_document(self):
        record = make_record("stored text")
        client = MagicMock()
        client.get.return_value = record.to_json()
        store = RedisRecordStore(StoreSettings(key_prefix="test"), client=client)

        assert store.get(record.id) == record
        client.get.assert_called_once_with(f"test:record:{record.id}")

    def test_list_skips_documents_deleted_mid_read(self):
        kept = make_record("kept")
        client = MagicMock()
        client.zrevrange.return_value = [kept.id, "gone"]
        client.mget.return_value = [kept.to_json(), None]
        store = RedisRecordStore(StoreSettings(), client=client)

        assert store.list() == [kept]

    def test_delete_reports_whether_document_existed(self):
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = [[1, 1], [0, 0]]
        store = RedisRecordStore(StoreSettings(), client=client)

        assert store.delete("abc") is True
        assert store.delete("abc") is False

    def test_ping_failure(self):
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("down")
        assert RedisRecordStore(StoreSettings(), client=client).ping() is False


class TestImageStorage:
    def test_save_upload_uses_unique_names(self, settings):
        images = ImageStorage(settings)

        first = images.save_upload(b"one", "PNG")
        second = images.save_upload(b"two", "png")

        assert first.path != second.path
        assert first.filename.endswith(".png")
        assert first.url == f"/uploads/{first.filename}"
        assert first.path.read_bytes() == b"one"

    def test_temp_path_is_outside_upload_dir(self, settings):
        images = ImageStorage(settings)
        path = images.temp_path()
        assert path.parent == images.processing_dir
        assert path.suffix == ".png"

    def test_path_for_url(self, settings):
        images = ImageStorage(settings)
        stored = images.save_upload(b"x", "gif")

        assert images.path_for_url(stored.url) == stored.path
        assert images.path_for_url("/elsewhere/a.png") is None
        assert images.path_for_url("/uploads/../secret.txt") is None

    def test_remove_is_best_effort(self, settings):
        images = ImageStorage(settings)
        stored = images.save_upload(b"x", "png")

        assert images.remove(stored.path) is True
        assert images.remove(stored.path) is False
        assert images.remove(None) is False
