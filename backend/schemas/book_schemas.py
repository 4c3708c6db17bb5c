"""
Book Schemas - Pydantic models for API requests/responses
"""
from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID
from typing import Optional, List, Literal


# ============================================
# Request Schemas
# ============================================

class BookCreate(BaseModel):
    """Schema for creating a new book"""
    title: str = Field(..., min_length=1, max_length=255, description="Book title")
    page_count: int = Field(default=0, ge=0, le=100, description="Number of pages created up front")


class BookUpdate(BaseModel):
    """Schema for renaming a book or changing its status"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[Literal["draft", "generating", "ready_to_print", "ordered", "completed"]] = None


class CoverDesign(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    subtitle: Optional[str] = None
    author_line: Optional[str] = None
    hero_image_key: Optional[str] = None
    theme: Literal["purple-magic", "ocean-adventure", "sunset-wonder", "forest-dreams"] = "purple-magic"
    dedication: Optional[str] = None


class CharacterImagesUpdate(BaseModel):
    keys: List[str] = Field(default_factory=list, max_length=5, description="Storage keys of reference photos")


# ============================================
# Response Schemas
# ============================================

class ImageProgress(BaseModel):
    total: int = 0
    completed: int = 0
    generating: int = 0
    percent: float = 0.0
    is_complete: bool = False


class BookResponse(BaseModel):
    """Schema for book response"""
    id: UUID
    title: str
    page_count: int
    status: str
    status_display: Optional[str] = Field(None, description="User-facing status label")
    cover_design: Optional[dict] = None
    character_images: List[str] = Field(default_factory=list)
    print_format: Optional[str] = None
    pod_package_id: Optional[str] = None
    print_status: Optional[str] = None
    printed_page_count: Optional[int] = None
    progress: Optional[ImageProgress] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookDetailResponse(BookResponse):
    """Schema for detailed book response with pages and images"""
    pages: list = Field(default_factory=list, description="Pages in reading order")
    interior_pdf_url: Optional[str] = None
    cover_pdf_url: Optional[str] = None


class PrintReadinessResponse(BaseModel):
    ready: bool
    reason: Optional[str] = None
    progress: Optional[dict] = None
