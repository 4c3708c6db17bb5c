"""
Image Schemas - Pydantic models for uploaded photos and their illustrations
"""
from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID
from typing import Optional, Literal


class TransformRequest(BaseModel):
    style: Literal["disney", "pixar", "watercolor", "storybook"] = "disney"


class ImageResponse(BaseModel):
    id: UUID
    page_id: UUID
    order: int
    generation_status: str
    status_display: Optional[str] = Field(None, description="User-facing status label")
    original_url: Optional[str] = None
    transformed_url: Optional[str] = None
    last_error: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
