"""
Order Lifecycle - Forward-only status machine for print orders.

    pending_payment -> payment_received -> generating_pdfs -> submitting_to_lulu
        -> submitted -> in_production -> shipped -> delivered

Failure is not a status: a failed order keeps the last status it reached and
carries `failed_at` / `last_error`, so it can be told apart from an order that
is simply waiting, and a manual retry resumes from where it stopped.
"""
from datetime import datetime, timezone
from typing import Optional

from errors import InvalidStatusTransition

ORDER_STATUS_SEQUENCE = (
    "pending_payment",
    "payment_received",
    "generating_pdfs",
    "submitting_to_lulu",
    "submitted",
    "in_production",
    "shipped",
    "delivered",
)

# Steps shown on the customer progress bar
PROGRESS_STEPS = ORDER_STATUS_SEQUENCE[1:]

# Statuses in which the print vendor owns the order
ACTIVE_VENDOR_STATUSES = ("submitted", "in_production", "shipped")

_STEP_TIMESTAMPS = {
    "payment_received": "paid_at",
    "submitted": "submitted_at",
    "shipped": "shipped_at",
    "delivered": "delivered_at",
}


def status_index(status: str) -> int:
    try:
        return ORDER_STATUS_SEQUENCE.index(status)
    except ValueError:
        raise ValueError(f"Unknown order status: {status}")


def can_transition(current: str, target: str) -> bool:
    """True only if `target` is strictly later than `current` in the sequence."""
    return status_index(target) > status_index(current)


def has_reached(order, status: str) -> bool:
    return status_index(order.status) >= status_index(status)


def advance_status(order, target: str, now: Optional[datetime] = None) -> None:
    """
    Move an order forward to `target` and stamp the matching step timestamp.

    Raises:
        InvalidStatusTransition: if `target` is not strictly ahead of the current status
    """
    if not can_transition(order.status, target):
        raise InvalidStatusTransition(order.status, target)

    now = now or datetime.now(timezone.utc)
    order.status = target
    order.updated_at = now

    stamp_field = _STEP_TIMESTAMPS.get(target)
    if stamp_field and getattr(order, stamp_field) is None:
        setattr(order, stamp_field, now)


def mark_failed(order, error: str, now: Optional[datetime] = None) -> None:
    now = now or datetime.now(timezone.utc)
    order.failed_at = now
    order.last_error = error or "Unknown error"
    order.updated_at = now


def clear_failure(order) -> None:
    order.failed_at = None
    order.last_error = None


# ============================================
# Display helpers
# ============================================

def is_status_complete(current: str, check: str, failed: bool = False) -> bool:
    if failed:
        return False
    return status_index(current) >= status_index(check)


def status_progress(status: str, failed: bool = False) -> float:
    """Percentage of the progress bar covered by `status` (0-100)."""
    if failed or status not in PROGRESS_STEPS:
        return 0.0
    return (PROGRESS_STEPS.index(status) + 1) / len(PROGRESS_STEPS) * 100


def can_track_shipment(status: str) -> bool:
    return status in ("shipped", "delivered")


def is_order_finished(status: str, failed: bool = False) -> bool:
    return failed or status == "delivered"


def next_status(status: str, failed: bool = False) -> Optional[str]:
    if failed or status == "delivered":
        return None
    return ORDER_STATUS_SEQUENCE[status_index(status) + 1]
