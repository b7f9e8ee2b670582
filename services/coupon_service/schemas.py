from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class CouponType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"


class CouponCreate(BaseModel):
    code: str = Field(min_length=3, max_length=64)
    type: CouponType
    value: float = Field(default=0.0, ge=0)
    minimum_order_amount: float = Field(default=0.0, ge=0)
    maximum_discount_amount: Optional[float] = Field(default=None, ge=0)
    usage_limit: Optional[int] = Field(default=None, gt=0)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    @model_validator(mode="after")
    def check_value(self):
        if self.type == CouponType.PERCENTAGE and self.value > 100:
            raise ValueError("percentage coupons cannot exceed 100")
        return self


class CouponResponse(BaseModel):
    id: int
    code: str
    type: str
    value: float
    minimum_order_amount: float
    maximum_discount_amount: Optional[float]
    usage_limit: Optional[int]
    used_count: int
    is_active: bool
    valid_from: datetime
    valid_until: Optional[datetime]

    class Config:
        from_attributes = True


class CouponValidateRequest(BaseModel):
    code: str
    subtotal: float = Field(ge=0)


class CouponValidateResponse(BaseModel):
    code: str
    valid: bool
    discount_amount: float = 0.0
    reason: Optional[str] = None
