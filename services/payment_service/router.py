from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import verify_internal_api_key

from .gateways import PaymentGateway, PaymentRequest, PaymentResult
from .schemas import PaymentCreate, PaymentResponse, VerifyResponse
from .service import PaymentService, get_payment_gateway

# Router-level dependency protects all payment endpoints
router = APIRouter(dependencies=[Depends(verify_internal_api_key)])
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "payment", "status": "running"}


@router.post("/", response_model=PaymentResult)
async def process_payment(
    payment: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    request = PaymentRequest(**payment.model_dump())
    return await PaymentService.process_payment(db, gateway, request)


@router.get("/order/{order_id}", response_model=List[PaymentResponse])
async def list_order_payments(order_id: int, db: AsyncSession = Depends(get_db)):
    return await PaymentService.list_for_order(db, order_id)


@router.get("/{payment_id}/verify", response_model=VerifyResponse)
async def verify_payment(
    payment_id: str,
    order_id: int,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    verified = await gateway.verify_payment(payment_id, order_id)
    return VerifyResponse(payment_id=payment_id, order_id=order_id, verified=verified)
