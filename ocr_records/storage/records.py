"""
Record model - the single persisted entity.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_record_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """Result of one OCR upload. Immutable once created."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True
    )

    id: str = Field(default_factory=new_record_id)
    image_url: str
    extracted_text: str = ""
    language: str = "eng"
    created_at: datetime = Field(default_factory=utcnow)

    def matches(self, search: str) -> bool:
        """Case-insensitive substring match against the extracted text."""
        return search.casefold() in self.extracted_text.casefold()

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data) -> "Record":
        return cls.model_validate_json(data)
