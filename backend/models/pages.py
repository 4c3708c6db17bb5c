"""
Pages Model - One stop of the book's narrative
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base

SPREAD_LAYOUTS = ("single", "duo", "trio")


class Pages(Base):
    __tablename__ = "pages"
    __table_args__ = (UniqueConstraint("book_id", "page_number", name="uq_pages_book_page_number"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    book_id = Column(Uuid(as_uuid=True), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    page_number = Column(Integer, nullable=False)  # 1-based
    sort_order = Column(Integer, nullable=False)  # 0-based position in the book
    title = Column(String, nullable=True)  # Stop/location name
    story_text = Column(Text, nullable=True)
    spread_layout = Column(String, nullable=False, default="duo")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationship to Books (many-to-one)
    book = relationship("Books", back_populates="pages")

    # Relationship to Images (one-to-many)
    images = relationship("Images", back_populates="page", cascade="all, delete-orphan", order_by="Images.order")

    def __repr__(self):
        return f"<Pages(id={self.id}, book_id={self.book_id}, page_number={self.page_number})>"
