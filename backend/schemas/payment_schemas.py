"""
Payment Schemas - Stripe checkout request body (camelCase, as sent by the web client)
"""
from pydantic import BaseModel
from typing import Optional


class CheckoutSessionRequest(BaseModel):
    orderId: Optional[str] = None
    bookId: Optional[str] = None
