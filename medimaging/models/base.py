"""
Base models for the MedImaging application.

This module provides the base pydantic classes and the enumerations shared
by the API contract.
"""

import enum
from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

type T = Any


class BaseModel(PydanticBaseModel):
    """Base model for all MedImaging models.

    Fields are declared in snake_case and exchanged as camelCase JSON.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def strip_nul(cls, value: T) -> T:
        """Replace NUL bytes that PACS tag values occasionally carry."""
        if isinstance(value, str):
            return value.replace("\x00", " ")
        return value


class StudyStatus(str, enum.Enum):
    """Enumeration of possible local study status values."""

    completed = "completed"
    in_progress = "in_progress"
    cancelled = "cancelled"


class UploadStatus(str, enum.Enum):
    """Where an uploaded file ended up."""

    uploaded_locally = "uploaded_locally"
    uploaded_to_pacs = "uploaded_to_pacs"


class PacsUploadStatus(str, enum.Enum):
    """Outcome of forwarding an uploaded file to the PACS."""

    pending = "pending"
    uploaded = "uploaded"
    failed = "failed"


class Pagination(BaseModel):
    """Pagination block shared by all listing responses.

    The name of the total counter differs per collection, so it is
    added by the subclasses.
    """

    current_page: int
    total_pages: int
    limit: int


class PageParams(BaseModel):
    """Validated page/limit pair."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
