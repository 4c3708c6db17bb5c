from datetime import date
from unittest.mock import patch

import pytest

from config import get_settings
from services import email_service, order_service
from conftest import FakeLulu, make_headers


@pytest.fixture
def resend_send(monkeypatch):
    monkeypatch.setattr(get_settings(), "resend_api_key", "re_test_123")
    with patch("services.email_service.resend.Emails.send", return_value={"id": "msg_1"}) as send:
        yield send


def _subjects(send):
    return [call.args[0]["subject"] for call in send.call_args_list]


def test_delivery_range_spans_months():
    assert email_service.delivery_range(7, 12, today=date(2026, 2, 25)) == "March 4 - March 9, 2026"


def test_format_price():
    assert email_service.format_price(4499) == "$44.99"


def test_order_confirmation_renders_order_details(book, make_order):
    order = make_order(book, status="payment_received")

    subject, html, text = email_service.render_email("order_confirmation", {
        "customer_name": "Ada",
        "book_title": book.title,
        "order_id": str(order.id),
        "price": "$44.99",
        "order_date": "March 1, 2026",
        "address": email_service._address(order),
        "estimated_delivery": "March 8 - March 13, 2026",
        "order_url": f"http://localhost:3000/orders/{order.id}",
    })

    assert subject == 'Order Confirmed! Your magical storybook "Beach Trip" is being created'
    assert "$44.99" in text
    assert "Springfield, IL 62701" in text
    assert f"/orders/{order.id}" in html


def test_html_escapes_book_title():
    _, html, text = email_service.render_email("book_delivered", {
        "customer_name": "Ada",
        "book_title": "<b>Trip</b>",
        "order_id": "1",
        "review_url": "",
        "create_book_url": "",
        "dashboard_url": "",
    })

    assert "&lt;b&gt;Trip&lt;/b&gt;" in html
    assert "<b>Trip</b>" in text


def test_send_skipped_without_api_key(book, make_order):
    order = make_order(book)

    with patch("services.email_service.resend.Emails.send") as send:
        assert email_service.send_order_confirmation(order) is False

    send.assert_not_called()


def test_send_order_confirmation(book, make_order, resend_send):
    order = make_order(book, status="payment_received")

    assert email_service.send_order_confirmation(order) is True

    message = resend_send.call_args.args[0]
    assert message["to"] == ["ada@example.com"]
    assert message["from"] == get_settings().email_from
    assert "Beach Trip" in message["subject"]


def test_delivery_failure_returns_false(book, make_order, resend_send):
    order = make_order(book)
    resend_send.side_effect = Exception("rate limited")

    assert email_service.send_order_confirmation(order) is False


def test_processing_paid_order_sends_confirmation(db, book, make_order, resend_send):
    order = make_order(book)

    with patch("services.order_service.pdf_service.generate_all_pdfs") as generate:
        generate.return_value.interior_url = "/media/interior.pdf"
        generate.return_value.cover_url = "/media/cover.pdf"
        result = order_service.process_order(db, order.id, lulu=FakeLulu())

    assert result.success is True
    assert len(resend_send.call_args_list) == 1
    assert _subjects(resend_send)[0].startswith("Order Confirmed!")


def test_failed_delivery_does_not_stop_processing(db, book, make_order, resend_send):
    order = make_order(book)
    resend_send.side_effect = Exception("rate limited")

    with patch("services.order_service.pdf_service.generate_all_pdfs") as generate:
        generate.return_value.interior_url = "/media/interior.pdf"
        generate.return_value.cover_url = "/media/cover.pdf"
        result = order_service.process_order(db, order.id, lulu=FakeLulu())

    assert result.success is True


def test_vendor_shipped_sends_tracking_email(db, book, make_order, resend_send):
    order = make_order(book, status="in_production", lulu_print_job_id="98765")
    lulu = FakeLulu(job_status="SHIPPED")
    lulu.job["line_items"] = [{"tracking_id": "1Z999", "tracking_urls": ["https://track.example/1Z999"]}]

    order_service.check_print_job_status(db, order.id, lulu=lulu)

    message = resend_send.call_args.args[0]
    assert message["subject"] == 'Your magical storybook "Beach Trip" is on its way!'
    assert "1Z999" in message["text"]


def test_unchanged_vendor_status_sends_nothing(db, book, make_order, resend_send):
    order = make_order(book, status="in_production", lulu_print_job_id="98765")

    order_service.check_print_job_status(db, order.id, lulu=FakeLulu(job_status="IN_PRODUCTION"))

    resend_send.assert_not_called()


def test_welcome_email_on_first_sign_in_only(client, resend_send):
    headers = make_headers("user_new", "new@example.com")

    client.get("/auth/me", headers=headers)
    client.get("/auth/me", headers=headers)

    assert len(resend_send.call_args_list) == 1
    message = resend_send.call_args.args[0]
    assert message["to"] == ["new@example.com"]
    assert message["subject"].startswith("Welcome to Before Bedtime Adventures")
