"""
FastAPI dependencies resolving the services attached to the app.
"""

from fastapi import Request

from ocr_records.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services
