from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .gateways import CustomerDetails


class PaymentCreate(BaseModel):
    order_id: int
    amount: float
    currency: str = "INR"
    payment_method: str
    customer: CustomerDetails


class PaymentResponse(BaseModel):
    id: int
    order_id: int
    kind: str
    method: str
    amount: float
    currency: str
    status: str
    transaction_id: Optional[str]
    error: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class VerifyResponse(BaseModel):
    payment_id: str
    order_id: int
    verified: bool
