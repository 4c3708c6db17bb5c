"""
Order Schemas - Pydantic models for print orders
"""
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from uuid import UUID
from typing import List, Optional


# ============================================
# Request Schemas
# ============================================

class ShippingAddress(BaseModel):
    name: str = Field(..., min_length=1)
    street1: str = Field(..., min_length=1)
    street2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state_code: str = Field(..., min_length=2, max_length=3)
    postal_code: str = Field(..., min_length=3, max_length=10)
    country_code: str = Field(default="US", min_length=2, max_length=2)
    phone_number: str = Field(..., min_length=7)


class OrderCreate(BaseModel):
    book_id: UUID
    shipping_address: ShippingAddress
    contact_email: EmailStr
    price: int = Field(..., gt=0, description="Price charged in cents")


# ============================================
# Response Schemas
# ============================================

class OrderStep(BaseModel):
    status: str
    label: str
    complete: bool


class OrderResponse(BaseModel):
    id: UUID
    book_id: UUID
    status: str
    status_display: Optional[str] = None
    status_color: Optional[str] = None
    progress: float = Field(default=0.0, description="Progress bar percentage (0-100)")
    is_failed: bool = False
    steps: List[OrderStep] = []
    next_status: Optional[str] = None
    can_track_shipment: bool = False
    is_finished: bool = False
    last_error: Optional[str] = None
    cost: int
    price: int
    contact_email: str
    shipping_address: ShippingAddress
    lulu_print_job_id: Optional[str] = None
    lulu_status: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_url: Optional[str] = None
    paid_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class OrderEstimateResponse(BaseModel):
    printed_page_count: int
    print_cost: float
    shipping_cost: float
    currency: str
