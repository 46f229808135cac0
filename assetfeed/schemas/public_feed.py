"""Public (named) feed schemas."""

import re

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List, Literal

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
SLUG_MESSAGE = "Feed slug must be lowercase letters, numbers, and hyphens only"

FilterType = Literal["all", "folder", "type", "tag"]


def validate_slug(v: str) -> str:
    v = v.strip()
    if not SLUG_PATTERN.match(v):
        raise ValueError(SLUG_MESSAGE)
    return v


class PublicFeedCreate(BaseModel):
    """Schema for creating a public feed."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    slug: str = Field(..., min_length=1, max_length=100)
    filter_type: FilterType = "all"
    filter_value: Optional[str] = Field(None, max_length=255)
    is_active: bool = True

    @field_validator('slug')
    @classmethod
    def check_slug(cls, v: str) -> str:
        return validate_slug(v)


class PublicFeedUpdate(BaseModel):
    """Partial update. Omitted fields are unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    filter_type: Optional[FilterType] = None
    filter_value: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None

    @field_validator('slug')
    @classmethod
    def check_slug(cls, v: Optional[str]) -> Optional[str]:
        return validate_slug(v) if v is not None else v


class PublicFeedResponse(BaseModel):
    """A public feed with its derived urls."""
    id: str
    name: str
    description: Optional[str] = None
    slug: str
    filter_type: str
    filter_value: Optional[str] = None
    folder_name: Optional[str] = None
    is_active: bool
    public_url: str
    feed_xml_url: str
    feed_json_url: str
    created_at: datetime
    updated_at: datetime


class PublicFeedListResponse(BaseModel):
    feeds: List[PublicFeedResponse]
