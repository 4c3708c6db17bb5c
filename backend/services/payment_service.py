"""
Payment Service - Stripe checkout for print orders

A checkout session is opened for an order in pending_payment. When Stripe
reports the session completed, the order moves to payment_received and is
handed to the processing task.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

import stripe
from sqlalchemy.orm import Session

from config import get_settings
from errors import PaymentError
from models.print_orders import PrintOrders
from services import email_service
from services.order_lifecycle import advance_status, clear_failure, mark_failed
from services.order_service import get_order

logger = logging.getLogger(__name__)

PRODUCT_DESCRIPTION = "Premium hardcover children's storybook with Disney-style illustrations"


@dataclass
class WebhookOutcome:
    event_type: str
    order_id: Optional[UUID] = None
    queue_processing: bool = False


def create_checkout_session(db: Session, order: PrintOrders, customer_ref: str) -> Dict[str, str]:
    """
    Open a Stripe Checkout session charging the order's price.

    Raises:
        PaymentError: if Stripe rejects the request
    """
    settings = get_settings()
    try:
        session = stripe.checkout.Session.create(
            api_key=settings.stripe_secret_key,
            payment_method_types=["card"],
            line_items=[
                {
                    "price_data": {
                        "currency": "usd",
                        "product_data": {
                            "name": order.book.title,
                            "description": PRODUCT_DESCRIPTION,
                        },
                        "unit_amount": order.price,
                    },
                    "quantity": 1,
                }
            ],
            mode="payment",
            success_url=f"{settings.app_url}/orders/{order.id}?success=true",
            cancel_url=f"{settings.app_url}/books/{order.book_id}/checkout?canceled=true",
            metadata={
                "bookId": str(order.book_id),
                "orderId": str(order.id),
                "userId": customer_ref,
            },
            customer_email=order.contact_email,
            allow_promotion_codes=True,
            billing_address_collection="auto",
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe session creation failed for order {order.id}: {e}")
        raise PaymentError(e.user_message or str(e), status_code=e.http_status) from e

    clear_failure(order)
    order.stripe_session_id = session.id
    db.commit()

    logger.info(f"Checkout session {session.id} opened for order {order.id}")
    return {"url": session.url, "session_id": session.id}


# ============================================
# Webhook events
# ============================================

def parse_event(payload: bytes) -> stripe.Event:
    """
    Raises:
        ValueError: if the body is not a JSON Stripe event
    """
    data = json.loads(payload)
    if not isinstance(data, dict) or not data.get("type"):
        raise ValueError("Not a Stripe event")
    return stripe.Event.construct_from(data, get_settings().stripe_secret_key)


def _session_order(db: Session, session: Dict[str, Any]) -> Optional[PrintOrders]:
    metadata = session.get("metadata") or {}
    order_id = metadata.get("orderId")
    if not order_id:
        logger.warning(f"Checkout session {session.get('id')} carries no orderId")
        return None

    order = get_order(db, order_id)
    if order is None:
        logger.warning(f"Checkout session {session.get('id')} refers to unknown order {order_id}")
    return order


def _checkout_completed(db: Session, event_type: str, session: Dict[str, Any]) -> WebhookOutcome:
    order = _session_order(db, session)
    if order is None:
        return WebhookOutcome(event_type)

    if order.status != "pending_payment":
        logger.info(f"Order {order.id} already {order.status}, ignoring repeated {event_type}")
        return WebhookOutcome(event_type, order.id)

    clear_failure(order)
    order.stripe_session_id = session.get("id")
    order.stripe_payment_intent_id = session.get("payment_intent")
    advance_status(order, "payment_received")
    order.book.status = "ordered"
    db.commit()
    logger.info(f"Order {order.id} marked as paid")

    email_service.send_order_confirmation(order)
    return WebhookOutcome(event_type, order.id, queue_processing=True)


def _checkout_expired(db: Session, event_type: str, session: Dict[str, Any]) -> WebhookOutcome:
    order = _session_order(db, session)
    if order is None:
        return WebhookOutcome(event_type)

    if order.status == "pending_payment":
        mark_failed(order, "Checkout session expired")
        db.commit()
        logger.warning(f"Checkout session expired for order {order.id}")
    return WebhookOutcome(event_type, order.id)


def handle_event(db: Session, event: stripe.Event) -> WebhookOutcome:
    event_type = event["type"]
    payload = event["data"]["object"]

    if event_type == "checkout.session.completed":
        return _checkout_completed(db, event_type, payload)
    if event_type == "checkout.session.expired":
        return _checkout_expired(db, event_type, payload)

    if event_type == "payment_intent.payment_failed":
        logger.warning(f"Payment failed for intent {payload.get('id')}")
    else:
        logger.info(f"Unhandled Stripe event type: {event_type}")
    return WebhookOutcome(event_type)
