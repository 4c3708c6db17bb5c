from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from errors import InvalidStatusTransition
from services.order_lifecycle import (
    ORDER_STATUS_SEQUENCE,
    advance_status,
    can_transition,
    clear_failure,
    has_reached,
    is_order_finished,
    is_status_complete,
    mark_failed,
    next_status,
    status_index,
    status_progress,
    can_track_shipment,
)


def _order(status="pending_payment"):
    return SimpleNamespace(
        status=status,
        updated_at=None,
        paid_at=None,
        submitted_at=None,
        shipped_at=None,
        delivered_at=None,
        failed_at=None,
        last_error=None,
    )


def test_sequence_order():
    assert ORDER_STATUS_SEQUENCE[0] == "pending_payment"
    assert ORDER_STATUS_SEQUENCE[-1] == "delivered"
    assert status_index("submitting_to_lulu") < status_index("submitted")


def test_unknown_status_rejected():
    with pytest.raises(ValueError):
        status_index("failed")


@pytest.mark.parametrize("current,target,expected", [
    ("pending_payment", "payment_received", True),
    ("payment_received", "submitted", True),
    ("submitted", "submitted", False),
    ("shipped", "in_production", False),
    ("delivered", "pending_payment", False),
])
def test_can_transition_only_forward(current, target, expected):
    assert can_transition(current, target) is expected


def test_advance_stamps_step_timestamp():
    order = _order()
    now = datetime(2026, 5, 1, tzinfo=timezone.utc)

    advance_status(order, "payment_received", now=now)

    assert order.status == "payment_received"
    assert order.paid_at == now
    assert order.updated_at == now


def test_advance_keeps_existing_timestamp():
    first = datetime(2026, 5, 1, tzinfo=timezone.utc)
    order = _order("in_production")
    order.shipped_at = first

    advance_status(order, "shipped", now=datetime(2026, 6, 1, tzinfo=timezone.utc))

    assert order.shipped_at == first


def test_advance_refuses_regression():
    order = _order("shipped")
    with pytest.raises(InvalidStatusTransition):
        advance_status(order, "submitted")
    assert order.status == "shipped"


def test_advance_refuses_repeat():
    order = _order("submitted")
    with pytest.raises(InvalidStatusTransition):
        advance_status(order, "submitted")


def test_failure_marker_does_not_touch_status():
    order = _order("generating_pdfs")

    mark_failed(order, "boom")
    assert order.status == "generating_pdfs"
    assert order.failed_at is not None
    assert order.last_error == "boom"

    clear_failure(order)
    assert order.failed_at is None
    assert order.last_error is None


def test_has_reached():
    order = _order("in_production")
    assert has_reached(order, "submitted")
    assert has_reached(order, "in_production")
    assert not has_reached(order, "shipped")


def test_display_helpers():
    assert status_progress("pending_payment") == 0.0
    assert status_progress("delivered") == 100.0
    assert status_progress("shipped", failed=True) == 0.0
    assert is_status_complete("shipped", "submitted")
    assert not is_status_complete("shipped", "submitted", failed=True)
    assert can_track_shipment("shipped")
    assert not can_track_shipment("in_production")
    assert is_order_finished("delivered")
    assert is_order_finished("submitted", failed=True)
    assert next_status("submitted") == "in_production"
    assert next_status("delivered") is None
