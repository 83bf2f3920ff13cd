"""Pydantic schemas for site content."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from portal_backend.core.enums import ContentKey
from .base import CamelModel


class ContentUpsert(CamelModel):
    key: ContentKey
    value: str


class ContentResponse(CamelModel):
    key: ContentKey
    value: str
    last_updated_by: Optional[UUID] = None
    updated_at: datetime
