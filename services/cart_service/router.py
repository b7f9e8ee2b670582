from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import NotFoundError
from shared.security.dependencies import get_optional_user

from .repository import DatabaseStorage
from .schemas import CartItemCreate, CartResponse, QuantityUpdate
from .service import CartStore, cart_item_count, cart_total, session_cart_key

router = APIRouter()
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "cart", "status": "running"}


async def get_cart_store(
    session_id: str,
    user_id: Optional[int] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> CartStore:
    store = CartStore(DatabaseStorage(db), key=session_cart_key(session_id), user_id=user_id)
    try:
        await store.ensure_access()
    except NotFoundError:
        # Someone else's cart looks exactly like a missing one
        raise HTTPException(status_code=404, detail="Cart not found")
    return store


def _response(session_id: str, items) -> CartResponse:
    return CartResponse(
        session_id=session_id,
        items=items,
        total=cart_total(items),
        item_count=cart_item_count(items),
    )


@router.get("/{session_id}", response_model=CartResponse)
async def get_cart(session_id: str, store: CartStore = Depends(get_cart_store)):
    return _response(session_id, await store.get_items())


@router.post("/{session_id}/items", response_model=CartResponse)
async def add_item(
    session_id: str, item: CartItemCreate, store: CartStore = Depends(get_cart_store)
):
    return _response(session_id, await store.add_item(item))


@router.patch("/{session_id}/items/{item_id}", response_model=CartResponse)
async def update_quantity(
    session_id: str,
    item_id: str,
    payload: QuantityUpdate,
    store: CartStore = Depends(get_cart_store),
):
    return _response(session_id, await store.update_quantity(item_id, payload.quantity))


@router.delete("/{session_id}/items/{item_id}", response_model=CartResponse)
async def remove_item(
    session_id: str, item_id: str, store: CartStore = Depends(get_cart_store)
):
    return _response(session_id, await store.remove_item(item_id))


@router.delete("/{session_id}", status_code=204)
async def clear_cart(session_id: str, store: CartStore = Depends(get_cart_store)):
    """Empties the cart for the session and releases its owner."""
    await store.clear()
