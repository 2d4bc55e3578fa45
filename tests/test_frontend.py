"""
Tests for the Streamlit frontend helpers.
"""

from ocr_records.frontend.app import RecordsClient, record_meta_html


class TestRecordMeta:
    def test_stored_values_are_escaped(self):
        record = {
            "language": '<img src=x onerror="alert(1)">',
            "createdAt": "2026-01-01T12:00:00Z<script>"
        }

        markup = record_meta_html(record)

        assert "<img" not in markup
        assert "<script>" not in markup
        assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in markup
        assert markup.startswith('<span class="record-meta">')

    def test_plain_values(self):
        markup = record_meta_html({"language": "eng", "createdAt": "2026-01-01T12:00:00Z"})
        assert markup == '<span class="record-meta">eng · 2026-01-01T12:00:00Z</span>'


class TestRecordsClient:
    def test_image_url_joins_base(self):
        client = RecordsClient("http://localhost:5000/")
        assert client.image_url({"imageUrl": "/uploads/a.png"}) == "http://localhost:5000/uploads/a.png"
