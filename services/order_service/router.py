from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import InvalidStatusTransitionError, NotFoundError
from shared.security.dependencies import get_current_admin, get_current_user

from .schemas import OrderResponse, OrderStatusUpdate, OrderTrackingResponse
from .service import OrderService
from .status import OrderStatus

router = APIRouter()
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "order", "status": "running"}


@router.get("/", response_model=List[OrderResponse])
async def list_my_orders(
    user_id: int = Depends(get_current_user), db: AsyncSession = Depends(get_db)
):
    return await OrderService.list_user_orders(db, user_id)


@router.get("/admin/all", response_model=List[OrderResponse])
async def list_all_orders(
    status: Optional[OrderStatus] = None,
    _: int = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.list_orders(db, status)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    request: Request,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await OrderService.get_order_for_user(
            db, order_id, user_id, is_admin=request.state.is_admin
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")


@router.get("/{order_id}/tracking", response_model=List[OrderTrackingResponse])
async def get_tracking(
    order_id: int,
    request: Request,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        order = await OrderService.get_order_for_user(
            db, order_id, user_id, is_admin=request.state.is_admin
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    return order.tracking


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_status(
    order_id: int,
    payload: OrderStatusUpdate,
    _: int = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await OrderService.update_order_status(db, order_id, payload.status)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
