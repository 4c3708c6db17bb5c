"""
Images Model - Uploaded photo and its cartoon transformation
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base

GENERATION_STATUSES = ("pending", "generating", "completed", "failed")


class Images(Base):
    __tablename__ = "images"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    page_id = Column(Uuid(as_uuid=True), ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True)
    original_key = Column(String, nullable=False)  # Storage key of the uploaded photo
    original_mime_type = Column(String, nullable=False, default="image/jpeg")
    transformed_key = Column(String, nullable=True)  # Storage key of the generated illustration
    generation_status = Column(String, nullable=False, default="pending", index=True)
    last_error = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)  # 1-3 images per page
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationship to Pages (many-to-one)
    page = relationship("Pages", back_populates="images")

    def __repr__(self):
        return f"<Images(id={self.id}, page_id={self.page_id}, generation_status={self.generation_status})>"
