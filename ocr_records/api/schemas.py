"""
Pydantic schemas for API request/response validation.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from ocr_records.storage import Record


class UploadResponse(BaseModel):
    """Result of a successful upload."""
    success: bool = True
    message: str = "Image processed and record saved successfully"
    record: Record

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": True,
                "message": "Image processed and record saved successfully",
                "record": {
                    "id": "5f0c2b1e9d8a4c6b8e7f1a2b3c4d5e6f",
                    "imageUrl": "/uploads/0b7e1f2c3d4a5b6c7d8e9f0a1b2c3d4e.png",
                    "extractedText": "Hello World",
                    "language": "eng",
                    "createdAt": "2026-01-01T12:00:00+00:00"
                }
            }
        }
    }


class RecordListResponse(BaseModel):
    """Records, newest first."""
    success: bool = True
    records: List[Record]
    count: int


class RecordDetailResponse(BaseModel):
    success: bool = True
    record: Record


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Record deleted successfully"


class ErrorResponse(BaseModel):
    """Error response."""
    success: bool = False
    error: str
    error_type: str
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    """Liveness response."""
    success: bool = True
    message: str
    timestamp: str


class ReadinessResponse(BaseModel):
    """Readiness response with dependency status."""
    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    components: Dict[str, Any] = Field(default_factory=dict)


class LanguageResponse(BaseModel):
    code: str
    name: str


class LanguageListResponse(BaseModel):
    success: bool = True
    default: str
    languages: List[LanguageResponse]
