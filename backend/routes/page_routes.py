"""
Page Routes - Story text, layout and photo uploads for a page
"""
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from database import get_db
from schemas.image_schemas import ImageResponse
from schemas.page_schemas import PageUpdate, PageResponse
from services import book_service, image_service
from services.access_service import Caller, get_caller
from tasks.image_tasks import transform_image_task
from utils.response_builders import page_response, image_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pages", tags=["pages"])


@router.patch("/{page_id}", response_model=PageResponse)
async def update_page(
    page_id: UUID,
    update: PageUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    page = book_service.update_page(db, caller, page_id, update.model_dump(exclude_unset=True))
    return page_response(page)


@router.post("/{page_id}/images", response_model=ImageResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    page_id: UUID,
    file: UploadFile = File(..., description="Vacation photo"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """
    Upload a photo to a page and queue its illustration.

    **Errors:**
    - 400: Unsupported type, empty file, or page already holds 3 images
    - 403/404: Page not owned / not found
    """
    data = await file.read()
    image = image_service.add_image(db, caller, page_id, data, file.content_type or "image/jpeg")

    transform_image_task.delay(str(image.id))
    logger.info(f"Transform queued for image {image.id}")

    return image_response(image)
