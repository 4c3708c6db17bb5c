"""
Order Service - Print order creation, processing and vendor status tracking

Processing drives an order through
    pending_payment -> payment_received -> generating_pdfs -> submitting_to_lulu -> submitted
and vendor polling carries it on to in_production -> shipped -> delivered.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Union
from uuid import UUID

from sqlalchemy.orm import Session

from config import get_settings
from errors import PrintVendorError
from models.books import Books
from models.print_orders import PrintOrders
from services import email_service, pdf_service
from services.access_service import Caller, require_book_owner
from services.lulu_client import LuluClient, map_lulu_status, extract_tracking
from services.order_lifecycle import (
    ACTIVE_VENDOR_STATUSES,
    advance_status,
    can_transition,
    clear_failure,
    has_reached,
    mark_failed,
)
from utils import print_specs

logger = logging.getLogger(__name__)


@dataclass
class OrderProcessResult:
    success: bool
    error: Optional[str] = None
    message: Optional[str] = None


def _parse_order_id(order_id: Union[str, UUID]) -> Optional[UUID]:
    if isinstance(order_id, UUID):
        return order_id
    try:
        return UUID(str(order_id))
    except ValueError:
        return None


def get_order(db: Session, order_id: Union[str, UUID]) -> Optional[PrintOrders]:
    parsed = _parse_order_id(order_id)
    if parsed is None:
        return None
    return db.query(PrintOrders).filter(PrintOrders.id == parsed).first()


# ============================================
# Creation / listing
# ============================================

def create_order(
    db: Session,
    caller: Caller,
    book_id: UUID,
    shipping_address: Dict[str, Any],
    contact_email: str,
    price: int,
) -> PrintOrders:
    """Create an order awaiting payment; cost is the configured Lulu print + shipping estimate."""
    book = require_book_owner(db, caller, book_id)

    order = PrintOrders(
        book_id=book.id,
        status="pending_payment",
        cost=get_settings().order_estimated_cost_cents,
        price=price,
        ship_name=shipping_address["name"],
        ship_street1=shipping_address["street1"],
        ship_street2=shipping_address.get("street2"),
        ship_city=shipping_address["city"],
        ship_state_code=shipping_address["state_code"],
        ship_postal_code=shipping_address["postal_code"],
        ship_country_code=shipping_address.get("country_code") or "US",
        ship_phone_number=shipping_address["phone_number"],
        contact_email=contact_email,
    )
    db.add(order)
    db.commit()
    db.refresh(order)

    logger.info(f"Order {order.id} created for book {book.id}")
    return order


def list_orders(db: Session, caller: Caller) -> List[PrintOrders]:
    return (
        db.query(PrintOrders)
        .join(Books, PrintOrders.book_id == Books.id)
        .filter(Books.user_id == caller.user_id)
        .order_by(PrintOrders.created_at.desc())
        .all()
    )


def estimate_order_cost(
    db: Session,
    caller: Caller,
    book_id: UUID,
    postal_code: str,
    country_code: str = "US",
    lulu: Optional[LuluClient] = None,
) -> Dict[str, Any]:
    """
    Print + GROUND shipping estimate for a book.

    Raises:
        PrintVendorError: if Lulu cannot quote
    """
    book = require_book_owner(db, caller, book_id)
    lulu = lulu or LuluClient.from_settings()

    page_count = book.printed_page_count or print_specs.calculate_printed_page_count(book.page_count)
    print_cost = lulu.get_print_cost_estimate(page_count)
    shipping = lulu.get_shipping_estimate(page_count, postal_code, country_code)

    return {
        "printed_page_count": page_count,
        "print_cost": print_cost["cost"],
        "shipping_cost": shipping["cost"],
        "currency": print_cost["currency"],
    }


# ============================================
# Processing
# ============================================

def _record_failure(db: Session, order_pk: UUID, error: str) -> None:
    try:
        db.rollback()
        order = db.query(PrintOrders).filter(PrintOrders.id == order_pk).first()
        if order is not None:
            mark_failed(order, error)
            db.commit()
    except Exception:
        logger.exception(f"Could not record failure on order {order_pk}")
        db.rollback()


def process_order(db: Session, order_id: Union[str, UUID], *, lulu: Optional[LuluClient] = None) -> OrderProcessResult:
    """
    Generate the PDFs for an order's book and submit it to Lulu.

    Steps already passed are skipped, so calling this again on a stalled or
    failed order resumes where it stopped. Never raises: any failure is
    logged, recorded on the order's failure marker (its status is left at
    the last step reached) and returned as a failure result.
    """
    order = get_order(db, order_id)
    if order is None:
        logger.warning(f"Order {order_id} not found")
        return OrderProcessResult(success=False, error="Order not found")

    if has_reached(order, "submitted"):
        logger.info(f"Order {order.id} already {order.status}, nothing to submit")
        return OrderProcessResult(success=True, message=f"Order already {order.status}")

    order_pk = order.id
    try:
        clear_failure(order)
        book = order.book
        logger.info(f"Processing order {order_pk} from status {order.status}")

        if order.status == "pending_payment":
            advance_status(order, "payment_received")
            book.status = "ordered"
            db.commit()
            email_service.send_order_confirmation(order)

        if order.status == "payment_received":
            advance_status(order, "generating_pdfs")
            db.commit()

        if order.status == "generating_pdfs":
            logger.info(f"Generating PDFs for order {order_pk}")
            bundle = pdf_service.generate_all_pdfs(db, book)
            order.interior_pdf_url = bundle.interior_url
            order.cover_pdf_url = bundle.cover_url
            advance_status(order, "submitting_to_lulu")
            db.commit()

        if order.status == "submitting_to_lulu":
            lulu = lulu or LuluClient.from_settings()
            job = lulu.submit_print_job(order, book)
            order.lulu_print_job_id = str(job["id"])
            order.lulu_status = (job.get("status") or {}).get("name")
            advance_status(order, "submitted")
            book.print_status = "submitted"
            db.commit()

    except Exception as e:
        logger.exception(f"Error processing order {order_pk}")
        error = str(e) or "Unknown error"
        _record_failure(db, order_pk, error)
        return OrderProcessResult(success=False, error=error)

    logger.info(f"Order {order_pk} submitted to Lulu as job {order.lulu_print_job_id}")
    return OrderProcessResult(success=True, message="Order processing completed")


# ============================================
# Vendor status tracking
# ============================================

def apply_vendor_status(order: PrintOrders, job: Dict[str, Any]) -> Optional[str]:
    """
    Copy a Lulu job snapshot onto the order. Returns the order status afterwards.
    Vendor statuses that would move the order backwards are ignored.
    """
    job_status = job.get("status") or {}
    lulu_status = job_status.get("name")
    mapped = map_lulu_status(lulu_status)
    order.lulu_status = lulu_status

    if mapped == "failed":
        reason = job_status.get("message") or "no reason given"
        mark_failed(order, f"Lulu job {lulu_status}: {reason}")
        return order.status

    if mapped and can_transition(order.status, mapped):
        advance_status(order, mapped)
        if mapped == "delivered":
            order.book.status = "completed"

    if lulu_status in ("SHIPPED", "DELIVERED"):
        tracking_number, tracking_url = extract_tracking(job)
        order.tracking_number = tracking_number or order.tracking_number
        order.tracking_url = tracking_url or order.tracking_url

    return order.status


def check_print_job_status(db: Session, order_id: Union[str, UUID], lulu: Optional[LuluClient] = None) -> Dict[str, Any]:
    """Fetch the order's Lulu job and apply it. Returns {"success", "status"?, "error"?}."""
    order = get_order(db, order_id)
    if order is None or not order.lulu_print_job_id:
        return {"success": False, "error": "No Lulu job ID found for order"}

    lulu = lulu or LuluClient.from_settings()
    try:
        job = lulu.get_print_job(order.lulu_print_job_id)
    except PrintVendorError as e:
        logger.error(f"Error checking print job status for order {order.id}: {e}")
        return {"success": False, "error": str(e)}

    previous_status = order.status
    new_status = apply_vendor_status(order, job)
    db.commit()
    email_service.notify_status_change(order, previous_status)
    logger.info(f"Order {order.id} vendor status {order.lulu_status} -> {new_status}")
    return {"success": True, "status": new_status}


def get_active_orders(db: Session) -> List[PrintOrders]:
    return (
        db.query(PrintOrders)
        .filter(PrintOrders.status.in_(ACTIVE_VENDOR_STATUSES))
        .filter(PrintOrders.failed_at.is_(None))
        .filter(PrintOrders.lulu_print_job_id.isnot(None))
        .all()
    )


def poll_active_orders(db: Session, lulu: Optional[LuluClient] = None, delay_seconds: float = 0.5) -> Dict[str, int]:
    """Refresh every order the vendor currently holds. Returns {"checked", "updated"}."""
    active_orders = get_active_orders(db)
    if not active_orders:
        return {"checked": 0, "updated": 0}

    lulu = lulu or LuluClient.from_settings()
    updated = 0
    for order in active_orders:
        result = check_print_job_status(db, order.id, lulu=lulu)
        if result["success"]:
            updated += 1
        else:
            logger.error(f"Failed to check order {order.id}: {result['error']}")

        # Stay under the vendor's rate limit
        if delay_seconds:
            time.sleep(delay_seconds)

    logger.info(f"Polled {len(active_orders)} active orders, {updated} updated")
    return {"checked": len(active_orders), "updated": updated}
