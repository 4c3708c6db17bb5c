"""
Image Routes - Illustration status and (re)generation
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from uuid import UUID

from database import get_db
from schemas.image_schemas import ImageResponse, TransformRequest
from services import image_service
from services.access_service import Caller, get_caller, require_image_owner
from tasks.image_tasks import transform_image_task
from utils.response_builders import image_response

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/{image_id}", response_model=ImageResponse)
async def get_image(
    image_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    return image_response(require_image_owner(db, caller, image_id))


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    image_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    image_service.delete_image(db, caller, image_id)


@router.post("/{image_id}/transform", response_model=ImageResponse, status_code=status.HTTP_202_ACCEPTED)
async def transform_image(
    image_id: UUID,
    request: TransformRequest = TransformRequest(),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Queue (or retry) the illustration for an image."""
    image = image_service.reset_for_transform(db, caller, image_id)
    transform_image_task.delay(str(image.id), request.style)
    return image_response(image)
