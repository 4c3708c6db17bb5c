"""
Users Model - Internal user record mapped from an external identity
"""
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class Users(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id = Column(String, unique=True, nullable=False, index=True)  # Identity provider subject
    email = Column(String, nullable=False)
    name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationship to Books (one-to-many)
    books = relationship("Books", back_populates="user")

    def __repr__(self):
        return f"<Users(id={self.id}, external_id={self.external_id}, email={self.email})>"
