"""
PrintOrders Model - Fulfillment request for a printed copy of a book
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class PrintOrders(Base):
    __tablename__ = "print_orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    book_id = Column(Uuid(as_uuid=True), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, nullable=False, default="pending_payment", index=True)
    cost = Column(Integer, nullable=False)  # In cents
    price = Column(Integer, nullable=False)  # In cents

    # Shipping address
    ship_name = Column(String, nullable=False)
    ship_street1 = Column(String, nullable=False)
    ship_street2 = Column(String, nullable=True)
    ship_city = Column(String, nullable=False)
    ship_state_code = Column(String, nullable=False)
    ship_postal_code = Column(String, nullable=False)
    ship_country_code = Column(String, nullable=False, default="US")
    ship_phone_number = Column(String, nullable=False)
    contact_email = Column(String, nullable=False)

    # Print vendor tracking
    lulu_print_job_id = Column(String, nullable=True)
    lulu_status = Column(String, nullable=True)
    tracking_number = Column(String, nullable=True)
    tracking_url = Column(String, nullable=True)
    interior_pdf_url = Column(String, nullable=True)
    cover_pdf_url = Column(String, nullable=True)

    # Payment
    stripe_session_id = Column(String, nullable=True, index=True)
    stripe_payment_intent_id = Column(String, nullable=True)

    # Step timestamps
    paid_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    # Explicit failure marker; status keeps the last successful step
    failed_at = Column(DateTime(timezone=True), nullable=True)
    last_error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationship to Books (many-to-one)
    book = relationship("Books", back_populates="print_orders")

    @property
    def is_failed(self) -> bool:
        return self.failed_at is not None

    def __repr__(self):
        return f"<PrintOrders(id={self.id}, book_id={self.book_id}, status={self.status})>"
