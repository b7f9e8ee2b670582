from typing import Optional

from pydantic import BaseModel

from services.order_service.schemas import Address, OrderResponse


class CheckoutRequest(BaseModel):
    session_id: str
    # Either a full address or the id of one in the shopper's address book
    shipping_address: Optional[Address] = None
    shipping_address_id: Optional[int] = None
    # Defaults to a copy of the shipping address
    billing_address: Optional[Address] = None
    payment_method: str
    coupon_code: Optional[str] = None
    notes: Optional[str] = None


class CheckoutResponse(BaseModel):
    success: bool
    order: Optional[OrderResponse] = None
    error: Optional[str] = None
