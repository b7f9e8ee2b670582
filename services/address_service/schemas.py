from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AddressType(str, Enum):
    SHIPPING = "shipping"
    BILLING = "billing"


class SavedAddressCreate(BaseModel):
    type: AddressType = AddressType.SHIPPING
    full_name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address_line_1: str = Field(min_length=1)
    address_line_2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(pattern=r"^\d{6}$")
    country: str = "India"
    is_default: bool = False


class SavedAddressUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    address_line_1: Optional[str] = Field(default=None, min_length=1)
    address_line_2: Optional[str] = None
    city: Optional[str] = Field(default=None, min_length=1)
    state: Optional[str] = Field(default=None, min_length=1)
    postal_code: Optional[str] = Field(default=None, pattern=r"^\d{6}$")
    country: Optional[str] = None


class SavedAddressResponse(BaseModel):
    id: int
    type: str
    full_name: str
    phone: str
    address_line_1: str
    address_line_2: Optional[str]
    city: str
    state: str
    postal_code: str
    country: str
    is_default: bool
    created_at: datetime

    class Config:
        from_attributes = True
