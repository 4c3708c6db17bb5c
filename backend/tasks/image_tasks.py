"""
Celery Tasks - Photo to illustration transforms
"""
from celery_app import celery_app
from database import get_db
from services.image_service import transform_image
from uuid import UUID
import logging

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def transform_image_task(self, image_id: str, style: str = "disney"):
    db = next(get_db())
    try:
        image = transform_image(db, UUID(image_id), style=style)
        return {"image_id": image_id, "generation_status": image.generation_status}
    except Exception:
        logger.exception(f"Error in transform task for image {image_id}")
        raise
    finally:
        db.close()
