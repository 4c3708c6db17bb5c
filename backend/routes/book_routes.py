"""
Book Routes - API endpoints for book management
"""
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from database import get_db
from schemas.book_schemas import (
    BookCreate,
    BookUpdate,
    BookResponse,
    BookDetailResponse,
    CoverDesign,
    CharacterImagesUpdate,
    PrintReadinessResponse,
)
from schemas.page_schemas import PageCreate, PageResponse
from services import book_service
from services.access_service import Caller, get_caller, require_book_owner
from utils.response_builders import book_response, book_detail_response, page_response

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=List[BookResponse])
async def list_books(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """
    List all books belonging to the authenticated user, newest first,
    with illustration progress.
    """
    books = book_service.list_books(db, caller)
    return [book_response(book, book_service.image_progress(db, book.id)) for book in books]


@router.post("", response_model=BookDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    book_data: BookCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """
    Create a new draft book with `page_count` empty pages.
    """
    book = book_service.create_book(db, caller, book_data.title, book_data.page_count)
    return book_detail_response(book)


@router.get("/{book_id}", response_model=BookDetailResponse)
async def get_book_details(
    book_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """
    Get a book with its pages and images. Only the book owner can access this endpoint.
    """
    book = require_book_owner(db, caller, book_id)
    return book_detail_response(book, book_service.image_progress(db, book.id))


@router.patch("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: UUID,
    update: BookUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    book = book_service.update_book(db, caller, book_id, title=update.title, book_status=update.status)
    return book_response(book)


@router.put("/{book_id}/cover", response_model=BookResponse)
async def update_cover(
    book_id: UUID,
    cover: CoverDesign,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    book = book_service.update_cover_design(db, caller, book_id, cover.model_dump())
    return book_response(book)


@router.put("/{book_id}/character-images", response_model=BookResponse)
async def set_character_images(
    book_id: UUID,
    update: CharacterImagesUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Choose up to five reference photos that keep characters consistent across illustrations."""
    book = book_service.set_character_images(db, caller, book_id, update.keys)
    return book_response(book)


@router.post("/{book_id}/character-images", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def upload_character_image(
    book_id: UUID,
    file: UploadFile = File(..., description="Reference photo of a character"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    data = await file.read()
    book = book_service.add_character_image(db, caller, book_id, data, file.content_type or "image/jpeg")
    return book_response(book)


@router.post("/{book_id}/pages", response_model=PageResponse, status_code=status.HTTP_201_CREATED)
async def append_page(
    book_id: UUID,
    page_data: PageCreate = PageCreate(),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    page = book_service.append_page(db, caller, book_id, page_data.spread_layout)
    return page_response(page)


@router.get("/{book_id}/pages", response_model=List[PageResponse])
async def list_pages(
    book_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    return [page_response(page) for page in book_service.get_pages(db, caller, book_id)]


@router.post("/{book_id}/print-format", response_model=BookResponse)
async def initialize_print_format(
    book_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Set the 8.5" square hardcover format and its printed page count."""
    book = book_service.initialize_print_format(db, caller, book_id)
    return book_response(book)


@router.get("/{book_id}/print-readiness", response_model=PrintReadinessResponse)
async def check_print_readiness(
    book_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    return book_service.check_print_readiness(db, caller, book_id)
