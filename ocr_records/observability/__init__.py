"""Observability module - logging and metrics."""

from ocr_records.observability.logging import setup_logging, get_logger
from ocr_records.observability.metrics import get_metrics, RecordMetrics

__all__ = ["setup_logging", "get_logger", "get_metrics", "RecordMetrics"]
