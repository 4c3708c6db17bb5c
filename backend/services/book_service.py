"""
Book Service - Book, page and cover mutations for the owning user
"""
import logging
from typing import List, Optional, Dict, Any
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from models.books import Books, BOOK_STATUSES, COVER_THEMES
from models.images import Images
from models.pages import Pages, SPREAD_LAYOUTS
from services import storage_service
from services.access_service import Caller, require_book_owner, require_page_owner
from services.image_transform import MAX_CHARACTER_REFERENCES
from utils import print_specs

logger = logging.getLogger(__name__)


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# ============================================
# Books
# ============================================

def list_books(db: Session, caller: Caller) -> List[Books]:
    return (
        db.query(Books)
        .filter(Books.user_id == caller.user_id)
        .order_by(Books.created_at.desc())
        .all()
    )


def create_book(db: Session, caller: Caller, title: str, page_count: int = 0) -> Books:
    """Create a draft book together with its pages 1..page_count in one transaction."""
    if page_count < 0:
        raise _bad_request("page_count cannot be negative")

    book = Books(
        user_id=caller.user_id,
        title=title,
        page_count=page_count,
        status="draft",
        character_images=[],
    )
    db.add(book)
    db.flush()

    for i in range(page_count):
        db.add(Pages(book_id=book.id, page_number=i + 1, sort_order=i))

    db.commit()
    db.refresh(book)

    logger.info(f"Book {book.id} created with {page_count} pages for user {caller.user_id}")
    return book


def update_book(db: Session, caller: Caller, book_id: UUID, title: Optional[str] = None,
                book_status: Optional[str] = None) -> Books:
    book = require_book_owner(db, caller, book_id)

    if title is not None:
        if not title.strip():
            raise _bad_request("Title cannot be empty")
        book.title = title.strip()

    if book_status is not None:
        if book_status not in BOOK_STATUSES:
            raise _bad_request(f"Invalid book status: {book_status}")
        book.status = book_status

    db.commit()
    db.refresh(book)
    return book


def update_cover_design(db: Session, caller: Caller, book_id: UUID, cover: Dict[str, Any]) -> Books:
    book = require_book_owner(db, caller, book_id)

    theme = cover.get("theme") or print_specs.DEFAULT_THEME
    if theme not in COVER_THEMES:
        raise _bad_request(f"Invalid cover theme: {theme}")

    # Replace the whole dict so the JSON column is flagged dirty
    book.cover_design = {**(book.cover_design or {}), **cover, "theme": theme}
    db.commit()
    db.refresh(book)
    logger.info(f"Cover design updated for book {book_id}")
    return book


def set_character_images(db: Session, caller: Caller, book_id: UUID, keys: List[str]) -> Books:
    book = require_book_owner(db, caller, book_id)

    if len(keys) > MAX_CHARACTER_REFERENCES:
        raise _bad_request(f"At most {MAX_CHARACTER_REFERENCES} character images are allowed")

    owned_prefix = f"{caller.user_id}/{book.id}/"
    for key in keys:
        if not key.startswith(owned_prefix) or not storage_service.exists(key):
            raise _bad_request(f"Unknown character image: {key}")

    book.character_images = list(keys)
    db.commit()
    db.refresh(book)
    return book


def add_character_image(db: Session, caller: Caller, book_id: UUID, data: bytes, mime_type: str) -> Books:
    book = require_book_owner(db, caller, book_id)

    current = list(book.character_images or [])
    if len(current) >= MAX_CHARACTER_REFERENCES:
        raise _bad_request(f"At most {MAX_CHARACTER_REFERENCES} character images are allowed")

    key = storage_service.build_key(
        caller.user_id, book.id, "characters", storage_service.extension_for(mime_type, ".jpg")
    )
    storage_service.save_bytes(key, data)
    book.character_images = current + [key]
    db.commit()
    db.refresh(book)
    return book


# ============================================
# Pages
# ============================================

def get_pages(db: Session, caller: Caller, book_id: UUID) -> List[Pages]:
    require_book_owner(db, caller, book_id)
    return (
        db.query(Pages)
        .filter(Pages.book_id == book_id)
        .order_by(Pages.sort_order.asc())
        .all()
    )


def append_page(db: Session, caller: Caller, book_id: UUID, spread_layout: str = "duo") -> Pages:
    """Add the next page and keep book.page_count equal to the number of pages."""
    book = require_book_owner(db, caller, book_id)
    if spread_layout not in SPREAD_LAYOUTS:
        raise _bad_request(f"Invalid spread layout: {spread_layout}")

    existing = db.query(Pages).filter(Pages.book_id == book.id).count()
    page = Pages(
        book_id=book.id,
        page_number=existing + 1,
        sort_order=existing,
        spread_layout=spread_layout,
    )
    db.add(page)
    book.page_count = existing + 1
    db.commit()
    db.refresh(page)

    logger.info(f"Page {page.page_number} appended to book {book.id}")
    return page


def update_page(db: Session, caller: Caller, page_id: UUID, fields: Dict[str, Any]) -> Pages:
    page = require_page_owner(db, caller, page_id)

    if "spread_layout" in fields and fields["spread_layout"] not in SPREAD_LAYOUTS:
        raise _bad_request(f"Invalid spread layout: {fields['spread_layout']}")

    for name in ("title", "story_text", "spread_layout"):
        if name in fields:
            setattr(page, name, fields[name])

    db.commit()
    db.refresh(page)
    return page


# ============================================
# Printing
# ============================================

def initialize_print_format(db: Session, caller: Caller, book_id: UUID) -> Books:
    book = require_book_owner(db, caller, book_id)

    book.print_format = print_specs.PRINT_FORMAT
    book.pod_package_id = print_specs.POD_PACKAGE_ID
    book.printed_page_count = print_specs.calculate_printed_page_count(book.page_count)
    book.print_status = "editing"
    db.commit()
    db.refresh(book)
    return book


def image_progress(db: Session, book_id: UUID) -> Dict[str, Any]:
    """Counts of a book's images by generation status."""
    images = (
        db.query(Images)
        .join(Pages, Images.page_id == Pages.id)
        .filter(Pages.book_id == book_id)
        .all()
    )
    total = len(images)
    completed = sum(1 for i in images if i.generation_status == "completed")
    generating = sum(1 for i in images if i.generation_status == "generating")
    return {
        "total": total,
        "completed": completed,
        "generating": generating,
        "percent": (completed / total) * 100 if total else 0.0,
        "is_complete": total > 0 and completed == total,
    }


def check_print_readiness(db: Session, caller: Caller, book_id: UUID) -> Dict[str, Any]:
    """
    A book is printable once every image is illustrated and the cover has a title.
    Returns {"ready", "reason"?, "progress"?}.
    """
    book = require_book_owner(db, caller, book_id)
    progress = image_progress(db, book.id)

    if progress["total"] == 0:
        return {"ready": False, "reason": "No images uploaded yet"}

    summary = {"completed": progress["completed"], "total": progress["total"]}
    if progress["completed"] < progress["total"]:
        return {
            "ready": False,
            "reason": f"{progress['completed']}/{progress['total']} images ready",
            "progress": summary,
        }

    if not (book.cover_design or {}).get("title"):
        return {"ready": False, "reason": "Cover title not set", "progress": summary}

    return {"ready": True, "progress": summary}
