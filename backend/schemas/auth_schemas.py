"""
Authentication Schemas - Response models for the signed-in user
"""
from pydantic import BaseModel, Field
from uuid import UUID
from typing import Optional


class UserResponse(BaseModel):
    """Response schema for the internal user mapped from the session identity"""
    id: UUID = Field(..., description="Internal user identifier")
    external_id: str = Field(..., description="Identity provider subject")
    email: str = Field(..., description="User's email address")
    name: Optional[str] = Field(None, description="Display name")

    class Config:
        from_attributes = True  # Allows creating from ORM models
