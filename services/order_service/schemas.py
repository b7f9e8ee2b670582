from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .status import OrderStatus


class Address(BaseModel):
    """Address snapshot copied into an order at checkout."""

    type: str = "shipping"
    full_name: str = ""
    phone: str = ""
    address_line_1: str = ""
    address_line_2: Optional[str] = None
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "India"


class OrderItemResponse(BaseModel):
    id: int
    product_id: str
    product_name: str
    product_image: Optional[str]
    flavor: str
    size: str
    quantity: int
    unit_price: float
    total_price: float

    class Config:
        from_attributes = True


class OrderTrackingResponse(BaseModel):
    id: int
    status: str
    message: Optional[str]
    location: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    order_number: str
    user_id: int
    status: str
    payment_status: str
    payment_method: str
    payment_intent_id: Optional[str]
    subtotal: float
    tax_amount: float
    shipping_amount: float
    cod_charge: float
    discount_amount: float
    total_amount: float
    currency: str
    coupon_code: Optional[str]
    shipping_address: Address
    billing_address: Address
    notes: Optional[str]
    created_at: datetime
    items: List[OrderItemResponse] = []
    tracking: List[OrderTrackingResponse] = []

    class Config:
        from_attributes = True


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
