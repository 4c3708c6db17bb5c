"""
Shared pytest fixtures: in-memory SQLite store, authenticated clients and stubbed providers
"""
import os
import tempfile

# Settings are read on first import of config; configure the environment first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["MEDIA_STORAGE_PATH"] = tempfile.mkdtemp(prefix="storybook-media-")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("LULU_CLIENT_KEY", "test-lulu-key")
os.environ.setdefault("LULU_CLIENT_SECRET", "test-lulu-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_123")
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from unittest.mock import patch, MagicMock

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from database import Base, SessionLocal, engine, get_db
from main import app
from models.print_orders import PrintOrders
from security import create_access_token
from services.access_service import resolve_caller
from services import book_service


class FakeLulu:
    """Records submissions and serves a configurable print job snapshot."""

    def __init__(self, job_status="CREATED", submit_error=None):
        self.submitted = []
        self.job = {"id": 98765, "status": {"name": job_status}, "line_items": []}
        self.submit_error = submit_error

    def submit_print_job(self, order, book):
        if self.submit_error:
            raise self.submit_error
        self.submitted.append((order.id, book.id))
        return {"id": 98765, "status": {"name": "CREATED"}}

    def get_print_job(self, job_id):
        return self.job


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_headers(external_id: str, email: str = None) -> dict:
    token = create_access_token({"sub": external_id, "email": email or f"{external_id}@example.com"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers():
    return make_headers("user_owner")


@pytest.fixture
def other_headers():
    return make_headers("user_other")


@pytest.fixture
def owner(db):
    return resolve_caller(db, {"external_id": "user_owner", "email": "user_owner@example.com"})


@pytest.fixture
def intruder(db):
    return resolve_caller(db, {"external_id": "user_other", "email": "user_other@example.com"})


@pytest.fixture
def book(db, owner):
    return book_service.create_book(db, owner, "Beach Trip", page_count=3)


@pytest.fixture
def make_order(db):
    def _make(book, status="pending_payment", **fields):
        order = PrintOrders(
            book_id=book.id,
            status=status,
            cost=2000,
            price=4499,
            ship_name="Ada Lovelace",
            ship_street1="1 Main St",
            ship_city="Springfield",
            ship_state_code="IL",
            ship_postal_code="62701",
            ship_phone_number="5555550100",
            contact_email="ada@example.com",
            **fields,
        )
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _make


@pytest.fixture
def fake_lulu():
    lulu = FakeLulu()
    with patch("services.order_service.LuluClient.from_settings", return_value=lulu):
        yield lulu


@pytest.fixture
def queued_tasks():
    """Replaces Celery .delay so nothing reaches a broker."""
    with patch("routes.page_routes.transform_image_task") as page_task, \
         patch("routes.image_routes.transform_image_task") as image_task, \
         patch("routes.order_routes.process_order_task") as order_task, \
         patch("routes.payment_routes.process_order_task") as paid_order_task:
        order_task.delay.return_value = MagicMock(id="task-1")
        paid_order_task.delay.return_value = MagicMock(id="task-2")
        yield {
            "page_transform": page_task,
            "image_transform": image_task,
            "process_order": order_task,
            "process_paid_order": paid_order_task,
        }
