from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.schemas import OrderResponse
from services.payment_service.gateways import PaymentGateway
from services.payment_service.service import get_payment_gateway
from shared.config.database import get_db
from shared.config.settings import CHECKOUT_RATE_LIMIT
from shared.errors import NotFoundError, PersistenceError, ValidationError
from shared.security import get_current_user, limiter

from .schemas import CheckoutRequest, CheckoutResponse
from .service import CheckoutService

router = APIRouter()

@router.get("/health")
async def health_check():
    return {"service": "checkout", "status": "running"}


@router.post("/", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def checkout(
    request: Request,                          # REQUIRED: slowapi needs this to check IP/Headers
    payload: CheckoutRequest,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    try:
        result = await CheckoutService.checkout(db, gateway, user_id, payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Cart not found")
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Order processing failed. Please try again.",
        )

    if not result.success:
        order = result.order
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "error": result.error,
                "order_id": order.id if order else None,
                "order_number": order.order_number if order else None,
            },
        )

    return CheckoutResponse(success=True, order=OrderResponse.model_validate(result.order))
