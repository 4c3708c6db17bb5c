from unittest.mock import patch, MagicMock

from database import get_db
from main import app
from models.print_orders import PrintOrders
from services.order_lifecycle import mark_failed


SHIPPING = {
    "name": "Ada Lovelace",
    "street1": "1 Main St",
    "city": "Springfield",
    "state_code": "IL",
    "postal_code": "62701",
    "phone_number": "5555550100",
}


# ============================================
# /api/orders/process
# ============================================

def test_process_missing_order_id_returns_400(client, db, book, make_order):
    order = make_order(book)

    response = client.post("/api/orders/process", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing orderId"}
    db.refresh(order)
    assert order.status == "pending_payment"
    assert order.paid_at is None
    assert db.query(PrintOrders).count() == 1


def test_process_without_body_returns_400(client):
    response = client.post("/api/orders/process")
    assert response.status_code == 400
    assert response.json()["error"] == "Missing orderId"


def test_process_non_string_order_id_returns_500(client, fake_lulu):
    response = client.post("/api/orders/process", json={"orderId": 123})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Order not found"}


def test_process_malformed_json_returns_500(client):
    response = client.post(
        "/api/orders/process",
        content=b"{orderId: nope",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Invalid JSON body"}


def test_process_unknown_order_returns_500(client, fake_lulu):
    response = client.post("/api/orders/process", json={"orderId": "order123"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Order not found"}


def test_process_order_success(client, db, book, make_order, fake_lulu):
    order = make_order(book, status="payment_received")

    response = client.post("/api/orders/process", json={"orderId": str(order.id)})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Order processing completed"}
    db.expire_all()
    assert db.get(PrintOrders, order.id).status == "submitted"


def test_process_failure_returns_500_with_error(client, db, book, make_order):
    order = make_order(book, status="payment_received")
    with patch("services.order_service.pdf_service.generate_all_pdfs", side_effect=RuntimeError("render failed")):
        response = client.post("/api/orders/process", json={"orderId": str(order.id)})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "render failed"}


def test_authenticated_process_requires_session_before_store_access(client):
    store_opened = []

    def tracking_get_db():
        store_opened.append(True)
        yield None

    app.dependency_overrides[get_db] = tracking_get_db

    response = client.post("/api/orders/process/authenticated", json={"orderId": "anything"})

    assert response.status_code == 401
    assert store_opened == []


def test_authenticated_process_rejects_invalid_token(client):
    response = client.post(
        "/api/orders/process/authenticated",
        json={"orderId": "anything"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


def test_authenticated_process_refuses_other_users_order(client, db, book, make_order, other_headers, fake_lulu):
    order = make_order(book, status="payment_received")

    response = client.post(
        "/api/orders/process/authenticated", json={"orderId": str(order.id)}, headers=other_headers
    )

    assert response.status_code == 403
    db.refresh(order)
    assert order.status == "payment_received"
    assert fake_lulu.submitted == []


def test_authenticated_process_by_owner(client, book, make_order, owner_headers, fake_lulu):
    order = make_order(book, status="payment_received")

    response = client.post(
        "/api/orders/process/authenticated", json={"orderId": str(order.id)}, headers=owner_headers
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(fake_lulu.submitted) == 1


# ============================================
# /orders
# ============================================

def test_create_order(client, book, owner_headers):
    response = client.post(
        "/orders",
        json={"book_id": str(book.id), "shipping_address": SHIPPING, "contact_email": "ada@example.com", "price": 4499},
        headers=owner_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending_payment"
    assert data["status_display"] == "Awaiting payment"
    assert data["cost"] == 2000
    assert data["price"] == 4499
    assert data["shipping_address"]["country_code"] == "US"
    assert data["is_failed"] is False


def test_create_order_for_other_users_book_refused(client, db, book, other_headers):
    response = client.post(
        "/orders",
        json={"book_id": str(book.id), "shipping_address": SHIPPING, "contact_email": "x@example.com", "price": 4499},
        headers=other_headers,
    )

    assert response.status_code == 403
    assert db.query(PrintOrders).count() == 0


def test_list_and_get_orders(client, book, make_order, owner_headers, other_headers):
    order = make_order(book)

    listed = client.get("/orders", headers=owner_headers)
    assert [o["id"] for o in listed.json()] == [str(order.id)]
    assert client.get("/orders", headers=other_headers).json() == []

    assert client.get(f"/orders/{order.id}", headers=owner_headers).status_code == 200
    assert client.get(f"/orders/{order.id}", headers=other_headers).status_code == 403


def test_failed_order_is_distinguishable(client, db, book, make_order, owner_headers):
    order = make_order(book, status="submitting_to_lulu")
    mark_failed(order, "Lulu API error: 500")
    db.commit()

    data = client.get(f"/orders/{order.id}", headers=owner_headers).json()

    assert data["status"] == "submitting_to_lulu"
    assert data["is_failed"] is True
    assert data["status_color"] == "error"
    assert data["last_error"] == "Lulu API error: 500"


def test_order_response_reports_progress_steps(client, book, make_order, owner_headers):
    order = make_order(book, status="shipped", tracking_number="1Z999")

    data = client.get(f"/orders/{order.id}", headers=owner_headers).json()

    completed = [step["status"] for step in data["steps"] if step["complete"]]
    assert completed == ["payment_received", "generating_pdfs", "submitting_to_lulu",
                         "submitted", "in_production", "shipped"]
    assert data["steps"][-1]["status"] == "delivered"
    assert data["steps"][-1]["complete"] is False
    assert data["next_status"] == "delivered"
    assert data["can_track_shipment"] is True
    assert data["is_finished"] is False


def test_refresh_status_requires_submission(client, book, make_order, owner_headers):
    order = make_order(book, status="payment_received")
    response = client.post(f"/orders/{order.id}/refresh-status", headers=owner_headers)
    assert response.status_code == 409


def test_refresh_status_applies_vendor_status(client, book, make_order, owner_headers, fake_lulu):
    order = make_order(book, status="submitted", lulu_print_job_id="98765")
    fake_lulu.job["status"]["name"] = "IN_PRODUCTION"

    response = client.post(f"/orders/{order.id}/refresh-status", headers=owner_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "in_production"


def test_queue_order_processing(client, book, make_order, owner_headers, queued_tasks):
    order = make_order(book)

    response = client.post(f"/orders/{order.id}/process", headers=owner_headers)

    assert response.status_code == 202
    queued_tasks["process_order"].delay.assert_called_once_with(str(order.id))


def test_estimate(client, book, owner_headers):
    lulu = MagicMock()
    lulu.get_print_cost_estimate.return_value = {"cost": 12.5, "currency": "USD"}
    lulu.get_shipping_estimate.return_value = {"cost": 4.99, "currency": "USD"}

    with patch("services.order_service.LuluClient.from_settings", return_value=lulu):
        response = client.get(
            "/orders/estimate", params={"book_id": str(book.id), "postal_code": "62701"}, headers=owner_headers
        )

    assert response.status_code == 200
    assert response.json() == {
        "printed_page_count": 24,
        "print_cost": 12.5,
        "shipping_cost": 4.99,
        "currency": "USD",
    }
    lulu.get_shipping_estimate.assert_called_once_with(24, "62701", "US")
