"""
Image Service - Photo uploads and their illustration lifecycle
(pending -> generating -> completed | failed)
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from errors import TransformError
from models.books import Books
from models.images import Images
from models.pages import Pages
from services import storage_service
from services.access_service import Caller, require_page_owner, require_image_owner
from services.image_transform import (
    ImageTransformer,
    ReferenceImage,
    TransformOptions,
    get_transformer,
    MAX_CHARACTER_REFERENCES,
)

logger = logging.getLogger(__name__)

MAX_IMAGES_PER_PAGE = 3
ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/heic")


def add_image(db: Session, caller: Caller, page_id: UUID, data: bytes, mime_type: str) -> Images:
    """Store an uploaded photo and attach it to the page as the next image slot."""
    page = require_page_owner(db, caller, page_id)

    if mime_type not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported image type: {mime_type}",
        )
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty upload")

    existing = db.query(Images).filter(Images.page_id == page.id).count()
    if existing >= MAX_IMAGES_PER_PAGE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A page holds at most {MAX_IMAGES_PER_PAGE} images",
        )

    key = storage_service.build_key(
        caller.user_id, page.book_id, "originals", storage_service.extension_for(mime_type, ".jpg")
    )
    storage_service.save_bytes(key, data)

    image = Images(
        page_id=page.id,
        original_key=key,
        original_mime_type=mime_type,
        generation_status="pending",
        order=existing + 1,
    )
    db.add(image)
    db.commit()
    db.refresh(image)

    logger.info(f"Image {image.id} uploaded to page {page.id}")
    return image


def delete_image(db: Session, caller: Caller, image_id: UUID) -> None:
    image = require_image_owner(db, caller, image_id)
    storage_service.delete(image.original_key)
    storage_service.delete(image.transformed_key)
    db.delete(image)
    db.commit()
    logger.info(f"Image {image_id} deleted")


def reset_for_transform(db: Session, caller: Caller, image_id: UUID) -> Images:
    """Put an owned image back in the queue before (re)enqueueing its transform."""
    image = require_image_owner(db, caller, image_id)
    if image.generation_status == "generating":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Image is already being transformed",
        )
    image.generation_status = "pending"
    image.last_error = None
    db.commit()
    db.refresh(image)
    return image


def _character_references(book: Books):
    references = []
    for key in (book.character_images or [])[:MAX_CHARACTER_REFERENCES]:
        try:
            references.append(ReferenceImage(data=storage_service.read_bytes(key)))
        except FileNotFoundError:
            logger.warning(f"Character reference {key} missing for book {book.id}")
    return references


def _mark_transform_failed(db: Session, image: Images, error: str) -> Images:
    db.rollback()
    image.generation_status = "failed"
    image.last_error = error
    db.commit()
    db.refresh(image)
    return image


def transform_image(
    db: Session,
    image_id: UUID,
    transformer: Optional[ImageTransformer] = None,
    style: str = "disney",
) -> Images:
    """
    Generate the illustration for one image and record the outcome.

    Provider failures are stored on the image (generation_status="failed",
    last_error) rather than raised; the image is returned either way.

    Raises:
        ValueError: if the image does not exist
    """
    image = db.query(Images).filter(Images.id == image_id).first()
    if not image:
        raise ValueError(f"Image {image_id} not found")

    page = db.query(Pages).filter(Pages.id == image.page_id).first()
    book = db.query(Books).filter(Books.id == page.book_id).first()

    logger.info(f"Starting transformation for image {image_id}")
    image.generation_status = "generating"
    image.last_error = None
    db.commit()

    try:
        transformer = transformer or get_transformer()
        options = TransformOptions(style=style, character_references=_character_references(book))
        original = storage_service.read_bytes(image.original_key)
        result = transformer.transform(original, image.original_mime_type, options)

        key = storage_service.build_key(
            book.user_id, book.id, "illustrations", storage_service.extension_for(result.mime_type, ".png")
        )
        storage_service.save_bytes(key, result.data)
    except TransformError as e:
        logger.error(f"Transformation failed for image {image_id}: {e}")
        return _mark_transform_failed(db, image, str(e))
    except Exception as e:
        # Storage or response-parsing errors
        logger.exception(f"Transformation failed for image {image_id}")
        return _mark_transform_failed(db, image, str(TransformError(str(e) or type(e).__name__)))

    previous_key = image.transformed_key
    image.transformed_key = key
    image.generation_status = "completed"
    db.commit()
    db.refresh(image)

    if previous_key and previous_key != key:
        storage_service.delete(previous_key)

    logger.info(f"Image {image_id} transformed successfully")
    return image
