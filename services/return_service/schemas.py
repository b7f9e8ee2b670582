from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .status import ReturnReason, ReturnStatus


class ReturnItemCreate(BaseModel):
    order_item_id: int
    quantity: int = Field(gt=0)
    reason: Optional[str] = None


class ReturnCreate(BaseModel):
    order_id: int
    reason: ReturnReason
    description: Optional[str] = None
    items: List[ReturnItemCreate] = Field(min_length=1)


class ReturnStatusUpdate(BaseModel):
    status: ReturnStatus
    admin_notes: Optional[str] = None


class ReturnItemResponse(BaseModel):
    id: int
    order_item_id: int
    product_name: str
    quantity: int
    unit_price: float
    reason: Optional[str]

    class Config:
        from_attributes = True


class ReturnResponse(BaseModel):
    id: int
    return_number: str
    order_id: int
    user_id: int
    reason: str
    description: Optional[str]
    status: str
    refund_amount: float
    return_shipping_cost: float
    admin_notes: Optional[str]
    created_at: datetime
    items: List[ReturnItemResponse] = []

    class Config:
        from_attributes = True
