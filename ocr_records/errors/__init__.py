"""Custom exception classes for the OCR records service."""


class OCRRecordsError(Exception):
    """Base exception for OCR records errors."""

    status_code = 500

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(OCRRecordsError):
    """Rejected upload or request input."""

    status_code = 400


class MissingImageError(ValidationError):
    """No image payload in the request."""

    def __init__(self, message: str = "No image file uploaded"):
        super().__init__(message)


class UnsupportedFormatError(ValidationError):
    """Unsupported image format."""

    def __init__(self, format: str, supported_formats: list):
        super().__init__(
            "Only image files are allowed!",
            {"format": format, "supported_formats": supported_formats}
        )
        self.format = format


class ImageTooLargeError(ValidationError):
    """Image exceeds size limit."""

    def __init__(self, size_bytes: int, max_bytes: int):
        super().__init__(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.",
            {"size_bytes": size_bytes, "max_bytes": max_bytes}
        )
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class RecordNotFoundError(OCRRecordsError):
    """No record with the given id."""

    status_code = 404

    def __init__(self, record_id: str):
        super().__init__("Record not found", {"id": record_id})
        self.record_id = record_id


class ProcessingError(OCRRecordsError):
    """Error while turning an upload into a record."""
    pass


class PreprocessingError(ProcessingError):
    """Error during image preprocessing."""
    pass


class RecognitionError(ProcessingError):
    """Error from the OCR engine."""

    def __init__(self, message: str, engine: str = None, details: dict = None):
        super().__init__(message, details)
        self.engine = engine


class PersistenceError(OCRRecordsError):
    """Record store read or write failed."""
    pass
