"""
Access Service - Resolves the caller's identity and enforces record ownership.

Every mutating data-access path receives an explicit Caller; ownership is
always decided by the owning book's user_id.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from models.books import Books
from models.images import Images
from models.pages import Pages
from models.print_orders import PrintOrders
from models.users import Users
from security import get_current_user
from services import email_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    user_id: UUID
    external_id: str


def get_or_create_user(db: Session, identity: dict) -> Users:
    """Map an external identity to the internal user, creating it on first sign-in."""
    user = db.query(Users).filter(Users.external_id == identity["external_id"]).first()
    if user:
        return user

    user = Users(
        external_id=identity["external_id"],
        email=identity.get("email") or "",
        name=identity.get("name"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user {user.id} for external identity {user.external_id}")
    email_service.send_welcome(user)
    return user


def resolve_caller(db: Session, identity: dict) -> Caller:
    user = get_or_create_user(db, identity)
    return Caller(user_id=user.id, external_id=user.external_id)


def get_caller(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Caller:
    """FastAPI dependency: authenticated session -> resolved Caller."""
    return resolve_caller(db, current_user)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def require_book_owner(db: Session, caller: Caller, book_id: UUID) -> Books:
    """
    Verify that the book belongs to the caller.
    Returns the book if ownership is valid, raises 404/403 otherwise.
    """
    book = db.query(Books).filter(Books.id == book_id).first()
    if not book:
        raise _not_found("Book not found")

    if book.user_id != caller.user_id:
        logger.warning(f"User {caller.user_id} refused access to book {book_id}")
        raise _forbidden("You don't have permission to access this book")

    return book


def require_page_owner(db: Session, caller: Caller, page_id: UUID) -> Pages:
    page = db.query(Pages).filter(Pages.id == page_id).first()
    if not page:
        raise _not_found("Page not found")
    require_book_owner(db, caller, page.book_id)
    return page


def require_image_owner(db: Session, caller: Caller, image_id: UUID) -> Images:
    image = db.query(Images).filter(Images.id == image_id).first()
    if not image:
        raise _not_found("Image not found")
    require_page_owner(db, caller, image.page_id)
    return image


def require_order_owner(db: Session, caller: Caller, order_id: UUID) -> PrintOrders:
    order = db.query(PrintOrders).filter(PrintOrders.id == order_id).first()
    if not order:
        raise _not_found("Order not found")
    require_book_owner(db, caller, order.book_id)
    return order
