"""Shopping cart state.

A CartStore is an explicit state object over an injected key-value
``Storage``. Every mutation rewrites the whole cart under one key, so the
cart is exactly as durable as the storage it was given.
"""
import json
import time
from typing import Callable, List, Optional

import structlog

from shared.errors import NotFoundError

from .repository import Storage
from .schemas import CartItem, CartItemCreate

logger = structlog.get_logger(__name__)

CART_STORAGE_KEY = "cart-storage"


def session_cart_key(session_id: str) -> str:
    return f"{CART_STORAGE_KEY}:{session_id}"


def _now_ms() -> int:
    return int(time.time() * 1000)


def cart_total(items: List[CartItem]) -> float:
    return round(sum(item.unit_price * item.quantity for item in items), 2)


def cart_item_count(items: List[CartItem]) -> int:
    return sum(item.quantity for item in items)


class CartStore:
    def __init__(
        self,
        storage: Storage,
        key: str = CART_STORAGE_KEY,
        clock: Optional[Callable[[], int]] = None,
        user_id: Optional[int] = None,
    ):
        self.storage = storage
        self.key = key
        self._clock = clock or _now_ms
        # signed-in shopper acting on the cart, None for anonymous callers
        self.user_id = user_id

    async def _load(self) -> Optional[dict]:
        raw = await self.storage.get(self.key)
        return json.loads(raw) if raw else None

    async def get_items(self) -> List[CartItem]:
        state = await self._load() or {}
        return [CartItem.model_validate(item) for item in state.get("items", [])]

    async def get_owner(self) -> Optional[int]:
        state = await self._load() or {}
        return state.get("owner_id")

    async def _save(self, items: List[CartItem], owner_id: Optional[int] = None) -> List[CartItem]:
        if owner_id is None:
            owner_id = await self.get_owner() or self.user_id
        payload = {"items": [item.model_dump() for item in items], "owner_id": owner_id}
        await self.storage.set(self.key, json.dumps(payload))
        return items

    async def claim(self, user_id: int) -> None:
        """Bind the cart to a signed-in shopper.

        The first signed-in shopper to touch a stored cart owns it from then
        on; anyone else gets NotFoundError. Clearing the cart drops the owner.
        """
        state = await self._load()
        if state is None:
            return
        owner_id = state.get("owner_id")
        if owner_id is None:
            await self._save(await self.get_items(), owner_id=user_id)
            logger.info("cart_claimed", cart=self.key, user_id=user_id)
        elif owner_id != user_id:
            raise NotFoundError("Cart", self.key)

    async def ensure_access(self) -> None:
        """Anonymous callers may only use carts nobody has claimed."""
        if self.user_id is not None:
            await self.claim(self.user_id)
        elif await self.get_owner() is not None:
            raise NotFoundError("Cart", self.key)

    async def add_item(self, new_item: CartItemCreate) -> List[CartItem]:
        """Merge into the line with the same (product_id, flavor, size), else append."""
        items = await self.get_items()
        key = (new_item.product_id, new_item.flavor, new_item.size)

        for item in items:
            if item.merge_key == key:
                item.quantity += new_item.quantity
                logger.info("cart_item_merged", cart=self.key, item_id=item.id, quantity=item.quantity)
                return await self._save(items)

        item_id = f"{new_item.product_id}-{new_item.flavor}-{new_item.size}-{self._clock()}"
        items.append(CartItem(id=item_id, **new_item.model_dump()))
        logger.info("cart_item_added", cart=self.key, item_id=item_id)
        return await self._save(items)

    async def remove_item(self, item_id: str) -> List[CartItem]:
        items = [item for item in await self.get_items() if item.id != item_id]
        return await self._save(items)

    async def update_quantity(self, item_id: str, quantity: int) -> List[CartItem]:
        if quantity <= 0:
            return await self.remove_item(item_id)

        items = await self.get_items()
        for item in items:
            if item.id == item_id:
                item.quantity = quantity
        return await self._save(items)

    async def clear(self) -> None:
        await self.storage.delete(self.key)
        logger.info("cart_cleared", cart=self.key)

    async def get_total(self) -> float:
        """Sum of unit_price * quantity. Tax and shipping are not included."""
        return cart_total(await self.get_items())

    async def get_item_count(self) -> int:
        """Total units in the cart, not the number of lines."""
        return cart_item_count(await self.get_items())
