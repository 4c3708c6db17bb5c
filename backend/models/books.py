"""
Books Model - A user's storybook project
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base

BOOK_STATUSES = ("draft", "generating", "ready_to_print", "ordered", "completed")
PRINT_STATUSES = ("editing", "ready_for_pdf", "generating_pdfs", "pdfs_ready", "submitted")
COVER_THEMES = ("purple-magic", "ocean-adventure", "sunset-wonder", "forest-dreams")


class Books(Base):
    __tablename__ = "books"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    page_count = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="draft", index=True)  # draft, generating, ready_to_print, ordered, completed
    character_images = Column(JSON, nullable=False, default=list)  # Storage keys of character reference photos
    cover_design = Column(JSON, nullable=True)  # {title, subtitle, author_line, hero_image_key, theme, dedication}

    # Print fields
    print_format = Column(String, nullable=True)
    pod_package_id = Column(String, nullable=True)
    print_status = Column(String, nullable=True)
    printed_page_count = Column(Integer, nullable=True)
    interior_pdf_key = Column(String, nullable=True)
    cover_pdf_key = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationship to Users (many-to-one)
    user = relationship("Users", back_populates="books")

    # Relationship to Pages (one-to-many)
    pages = relationship("Pages", back_populates="book", cascade="all, delete-orphan", order_by="Pages.sort_order")

    # Relationship to PrintOrders (one-to-many)
    print_orders = relationship("PrintOrders", back_populates="book", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Books(id={self.id}, title={self.title}, status={self.status})>"
