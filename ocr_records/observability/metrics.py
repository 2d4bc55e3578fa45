"""
Prometheus metrics for monitoring.
"""

from functools import lru_cache
from prometheus_client import Counter, Histogram, Gauge, Info

from ocr_records import __version__
from ocr_records.recognition.languages import SUPPORTED_LANGUAGES


def language_label(language: str) -> str:
    """Label value for a client-supplied language; unknown codes share one series."""
    return language if language in SUPPORTED_LANGUAGES else "other"


class RecordMetrics:
    """Upload pipeline and record store metrics."""

    def __init__(self):
        # Upload metrics
        self.uploads_total = Counter(
            "ocr_records_uploads_total",
            "Total image uploads",
            ["language", "status"]
        )

        self.upload_duration = Histogram(
            "ocr_records_upload_duration_seconds",
            "Upload to record duration",
            ["language"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)
        )

        # Processing metrics
        self.preprocessing_duration = Histogram(
            "ocr_records_preprocessing_duration_seconds",
            "Image preprocessing duration",
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
        )

        self.recognition_duration = Histogram(
            "ocr_records_recognition_duration_seconds",
            "OCR engine call duration",
            ["engine"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
        )

        self.characters_extracted = Counter(
            "ocr_records_characters_extracted_total",
            "Total characters extracted"
        )

        # Store metrics
        self.records_deleted = Counter(
            "ocr_records_deleted_total",
            "Records deleted"
        )

        # Error metrics
        self.errors_total = Counter(
            "ocr_records_errors_total",
            "Total errors",
            ["error_type"]
        )

        # System metrics
        self.active_requests = Gauge(
            "ocr_records_active_requests",
            "Currently active requests"
        )

        self.info = Info(
            "ocr_records",
            "OCR records service information"
        )
        self.info.info({"version": __version__})

    def record_upload(self, language: str, status: str, duration: float):
        """Record a finished upload."""
        language = language_label(language)
        self.uploads_total.labels(language=language, status=status).inc()
        self.upload_duration.labels(language=language).observe(duration)

    def record_preprocessing(self, duration: float):
        self.preprocessing_duration.observe(duration)

    def record_recognition(self, engine: str, duration: float, char_count: int):
        """Record an OCR engine call."""
        self.recognition_duration.labels(engine=engine).observe(duration)
        self.characters_extracted.inc(char_count)

    def record_delete(self):
        self.records_deleted.inc()

    def record_error(self, error_type: str):
        """Record an error."""
        self.errors_total.labels(error_type=error_type).inc()


@lru_cache()
def get_metrics() -> RecordMetrics:
    """Get singleton metrics instance."""
    return RecordMetrics()
