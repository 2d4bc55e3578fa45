"""
HTTP tests for the upload, record and health endpoints.
"""

from datetime import datetime, timezone

from conftest import FailingRecognizer, files_in, make_image_bytes, make_noise_png


def upload(client, content, filename="sample.png", content_type="image/png", language="eng"):
    data = {"language": language} if language is not None else {}
    return client.post(
        "/api/upload",
        files={"image": (filename, content, content_type)},
        data=data
    )


def parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestUpload:
    def test_upload_list_delete_scenario(self, client, settings):
        sample = make_noise_png()
        start = datetime.now(timezone.utc)

        response = upload(client, sample, "sample.png", language="eng")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Image processed and record saved successfully"
        record = body["record"]
        assert record["language"] == "eng"
        assert isinstance(record["extractedText"], str)
        assert parse_time(record["createdAt"]) >= start

        image = client.get(record["imageUrl"])
        assert image.status_code == 200
        assert image.content == sample

        listing = client.get("/api/records").json()
        assert listing["success"] is True
        assert listing["records"][0]["id"] == record["id"]
        assert listing["count"] == 1

        deleted = client.delete(f"/api/records/{record['id']}")
        assert deleted.status_code == 200
        assert deleted.json() == {"success": True, "message": "Record deleted successfully"}

        missing = client.get(f"/api/records/{record['id']}")
        assert missing.status_code == 404
        assert missing.json()["error"] == "Record not found"
        assert files_in(settings.upload_dir) == []

    def test_language_defaults_to_eng(self, client, png_bytes):
        response = upload(client, png_bytes, language=None)
        assert response.status_code == 201
        assert response.json()["record"]["language"] == "eng"

    def test_executable_is_rejected(self, client):
        before = client.get("/api/records").json()

        response = upload(client, b"MZ\x90\x00\x03", "setup.exe", "application/octet-stream")

        assert response.status_code == 400
        assert response.json()["error"] == "Only image files are allowed!"
        assert client.get("/api/records").json() == before

    def test_oversized_image_is_rejected(self, client, settings):
        content = b"\x89PNG\r\n\x1a\n" + b"\0" * (15 * 1024 * 1024)

        response = upload(client, content, "big.png")

        assert response.status_code == 400
        assert response.json()["error"] == "File too large. Maximum size is 10MB."
        assert files_in(settings.upload_dir) == []

    def test_legacy_bmp_content_type(self, client):
        response = upload(client, make_image_bytes("BMP"), "scan.bmp", "image/x-ms-bmp")
        assert response.status_code == 201

    def test_image_field_sent_as_text(self, client):
        response = client.post("/api/upload", data={"image": "notafile", "language": "eng"})
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "No image file uploaded",
            "error_type": "MissingImageError"
        }

    def test_missing_file(self, client):
        response = client.post("/api/upload", data={"language": "eng"})
        assert response.status_code == 400
        assert response.json()["error"] == "No image file uploaded"

    def test_recognition_failure(self, make_client, settings, png_bytes):
        client = make_client(FailingRecognizer())

        response = upload(client, png_bytes)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to process image"
        assert "engine exploded" in body["details"]
        assert files_in(settings.upload_dir) == []
        assert files_in(settings.processing_dir) == []
        assert client.get("/api/records").json()["count"] == 0

    def test_corrupt_image(self, client, settings):
        response = upload(client, b"\x89PNG garbage", "broken.png")

        assert response.status_code == 500
        assert response.json()["error_type"] == "PreprocessingError"
        assert files_in(settings.upload_dir) == []


class TestRecords:
    def test_newest_first_and_search(self, client, recognizer):
        recognizer.text = "Quarterly REPORT"
        report = upload(client, make_image_bytes()).json()["record"]
        recognizer.text = "shopping list"
        shopping = upload(client, make_image_bytes()).json()["record"]

        everything = client.get("/api/records").json()
        assert [r["id"] for r in everything["records"]] == [shopping["id"], report["id"]]

        found = client.get("/api/records", params={"search": "report"}).json()
        assert [r["id"] for r in found["records"]] == [report["id"]]
        assert found["count"] == 1

        assert client.get("/api/records", params={"search": ""}).json() == everything

    def test_get_record(self, client, png_bytes):
        record = upload(client, png_bytes).json()["record"]

        response = client.get(f"/api/records/{record['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "record": record}

    def test_malformed_id_is_not_found(self, client):
        assert client.get("/api/records/%20not*an*id").status_code == 404
        assert client.delete("/api/records/nope").status_code == 404

    def test_second_delete_is_not_found(self, client, png_bytes):
        record = upload(client, png_bytes).json()["record"]

        assert client.delete(f"/api/records/{record['id']}").status_code == 200
        assert client.delete(f"/api/records/{record['id']}").status_code == 404


class TestHealth:
    def test_liveness(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "OCR API is running"
        assert parse_time(body["timestamp"]).tzinfo is not None
        assert "X-Request-ID" in response.headers

    def test_readiness(self, client):
        body = client.get("/api/health/ready").json()
        assert body["status"] == "healthy"
        assert body["components"]["record_store"]["backend"] == "memory"

    def test_readiness_with_unavailable_engine(self, make_client):
        body = make_client(FailingRecognizer()).get("/api/health/ready").json()
        assert body["status"] == "degraded"

    def test_languages(self, client):
        body = client.get("/api/languages").json()
        codes = [lang["code"] for lang in body["languages"]]
        assert body["default"] == "eng"
        assert "eng" in codes and "chi_sim" in codes

    def test_metrics(self, client, png_bytes):
        upload(client, png_bytes)
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "ocr_records_uploads_total" in response.text
