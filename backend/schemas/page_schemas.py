"""
Page Schemas - Pydantic models for page requests/responses
"""
from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID
from typing import Optional, List, Literal

from schemas.image_schemas import ImageResponse


class PageCreate(BaseModel):
    spread_layout: Literal["single", "duo", "trio"] = "duo"


class PageUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255, description="Stop/location name")
    story_text: Optional[str] = Field(None, max_length=2000)
    spread_layout: Optional[Literal["single", "duo", "trio"]] = None


class PageResponse(BaseModel):
    id: UUID
    book_id: UUID
    page_number: int
    sort_order: int
    title: Optional[str] = None
    story_text: Optional[str] = None
    spread_layout: str
    images: List[ImageResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
