"""
Upload and record API routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from ocr_records.api.dependencies import get_services
from ocr_records.api.schemas import (
    DeleteResponse,
    ErrorResponse,
    RecordDetailResponse,
    RecordListResponse,
    UploadResponse,
)
from ocr_records.services import Services

router = APIRouter()


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Upload Image",
    description="Upload an image, extract its text and save the result as a record."
)
async def upload_image(
    image: Optional[UploadFile] = File(None, description="Image file to process"),
    language: Optional[str] = Form(None, description="OCR language code, e.g. eng"),
    services: Services = Depends(get_services)
):
    """
    Process an uploaded image into a record.

    - **image**: Image file (PNG, JPEG, GIF, BMP, TIFF, WEBP), at most 10MB
    - **language**: Tesseract language code (default: eng)
    """
    content = None
    filename = None
    content_type = None

    if image is not None:
        limit = services.pipeline.settings.max_upload_size_bytes
        # One byte past the limit is enough to reject oversized files
        content = await image.read(limit + 1)
        filename = image.filename
        content_type = image.content_type
        await image.close()

    # Preprocessing and OCR block; keep them off the event loop
    record = await run_in_threadpool(
        services.pipeline.handle_upload,
        content,
        filename,
        content_type,
        language
    )

    return UploadResponse(record=record)


@router.get(
    "/records",
    response_model=RecordListResponse,
    summary="List Records",
    description="List saved records newest first, optionally filtered by a case-insensitive text search."
)
async def list_records(
    search: Optional[str] = Query(None, description="Substring to look for in extracted text"),
    services: Services = Depends(get_services)
):
    records = await run_in_threadpool(services.records.list_records, search)
    return RecordListResponse(records=records, count=len(records))


@router.get(
    "/records/{record_id}",
    response_model=RecordDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get Record"
)
async def get_record(record_id: str, services: Services = Depends(get_services)):
    record = await run_in_threadpool(services.records.get_record, record_id)
    return RecordDetailResponse(record=record)


@router.delete(
    "/records/{record_id}",
    response_model=DeleteResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete Record",
    description="Delete a record and its stored image."
)
async def delete_record(record_id: str, services: Services = Depends(get_services)):
    await run_in_threadpool(services.records.delete_record, record_id)
    return DeleteResponse()
