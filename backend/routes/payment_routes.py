"""
Payment Routes - Stripe checkout sessions and the Stripe webhook
"""
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from database import get_db
from errors import PaymentError
from schemas.payment_schemas import CheckoutSessionRequest
from services import order_service, payment_service
from services.access_service import Caller, get_caller
from tasks.order_tasks import process_order_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stripe", tags=["payments"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/create-session")
def create_checkout_session(
    request: CheckoutSessionRequest,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Open a Stripe Checkout page for one of the caller's unpaid orders. Returns {"url"}."""
    if not request.orderId or not request.bookId:
        return _error(status.HTTP_400_BAD_REQUEST, "Missing required fields")

    order = order_service.get_order(db, request.orderId)
    if order is None or order.book.user_id != caller.user_id:
        return _error(status.HTTP_403_FORBIDDEN, "Order not found or unauthorized")
    if str(order.book_id) != request.bookId:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid order")
    if order.status != "pending_payment":
        return _error(status.HTTP_409_CONFLICT, f"Order is already {order.status}")

    try:
        session = payment_service.create_checkout_session(db, order, caller.external_id)
    except PaymentError as e:
        return _error(status.HTTP_502_BAD_GATEWAY, str(e))

    return {"url": session["url"]}


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Stripe event receiver. A completed checkout marks the order paid and
    queues its processing.
    """
    payload = await request.body()
    # TODO: verify the Stripe-Signature header with stripe.Webhook.construct_event and STRIPE_WEBHOOK_SECRET
    try:
        event = payment_service.parse_event(payload)
    except ValueError:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid payload")

    outcome = payment_service.handle_event(db, event)
    if outcome.queue_processing:
        task = process_order_task.delay(str(outcome.order_id))
        logger.info(f"Processing queued for paid order {outcome.order_id} (task {task.id})")

    return {"received": True}
