from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.pricing import shipping_for
from shared.config.database import get_db
from shared.errors import CouponError
from shared.security.dependencies import get_current_admin, get_current_user

from .repository import CouponRepository
from .schemas import CouponCreate, CouponResponse, CouponValidateRequest, CouponValidateResponse
from .service import CouponService, calculate_discount, normalize_code

router = APIRouter()
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "coupon", "status": "running"}


@router.get("/", response_model=List[CouponResponse])
async def list_coupons(db: AsyncSession = Depends(get_db)):
    return await CouponService.list_active(db)


@router.post("/", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    payload: CouponCreate,
    _: int = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    if await CouponRepository.get_by_code(db, normalize_code(payload.code)):
        raise HTTPException(status_code=409, detail="Coupon code already exists")
    return await CouponService.create_coupon(db, payload)


@router.post("/validate", response_model=CouponValidateResponse)
async def validate_coupon(
    payload: CouponValidateRequest,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    code = normalize_code(payload.code)
    try:
        coupon = await CouponService.validate(db, code, user_id, payload.subtotal)
    except CouponError as e:
        return CouponValidateResponse(code=code, valid=False, reason=e.reason)
    discount = calculate_discount(coupon, payload.subtotal, shipping_for(payload.subtotal))
    return CouponValidateResponse(code=code, valid=True, discount_amount=discount)
