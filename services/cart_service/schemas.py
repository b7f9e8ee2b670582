from typing import List, Optional

from pydantic import BaseModel, Field


class CartItemCreate(BaseModel):
    product_id: str
    name: str
    unit_price: float = Field(ge=0)
    image: Optional[str] = None
    flavor: str
    size: str
    quantity: int = Field(default=1, gt=0)


class CartItem(CartItemCreate):
    id: str

    @property
    def merge_key(self) -> tuple:
        return (self.product_id, self.flavor, self.size)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


class QuantityUpdate(BaseModel):
    # zero or negative removes the line
    quantity: int


class CartResponse(BaseModel):
    session_id: str
    items: List[CartItem] = []
    total: float
    item_count: int
