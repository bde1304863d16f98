"""Detached views of stored documents."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    number: int
    width: float
    height: float
    rotation: int = 0


class DocumentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    filename: str | None = None
    document_path: str
    size: int
    created_at: datetime


class DocumentRecord(DocumentSummary):
    """A document together with its remaining pages."""

    pages: list[PageRecord] = Field(default_factory=list)
