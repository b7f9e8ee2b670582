from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import PAYMENT_SIMULATED_DELAY

from .gateways import PaymentGateway, PaymentRequest, PaymentResult, SimulatedGateway
from .models import Payment
from .repository import PaymentRepository

logger = structlog.get_logger(__name__)

_default_gateway = SimulatedGateway(delay=PAYMENT_SIMULATED_DELAY)


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency; override it to plug in a real gateway."""
    return _default_gateway


class PaymentService:
    @staticmethod
    async def process_payment(
        db: AsyncSession, gateway: PaymentGateway, request: PaymentRequest
    ) -> PaymentResult:
        """Charge through the gateway and record the attempt, successful or not."""
        try:
            result = await gateway.process_payment(request)
        except Exception as e:
            # A gateway that blows up is a declined payment, not a crash
            logger.exception("payment_gateway_error", order_id=request.order_id)
            result = PaymentResult(success=False, error=str(e) or "Payment processing failed")

        await PaymentRepository.create_payment(db, Payment(
            order_id=request.order_id,
            kind="charge",
            method=request.payment_method,
            amount=request.amount,
            currency=request.currency,
            status="success" if result.success else "failed",
            transaction_id=result.payment_id,
            error=result.error,
        ))
        return result

    @staticmethod
    async def refund_payment(
        db: AsyncSession,
        gateway: PaymentGateway,
        order_id: int,
        payment_id: str,
        amount: float,
        method: str,
        reason: str,
    ) -> PaymentResult:
        result = await gateway.refund_payment(payment_id, amount, reason)
        await PaymentRepository.create_payment(db, Payment(
            order_id=order_id,
            kind="refund",
            method=method,
            amount=amount,
            status="success" if result.success else "failed",
            transaction_id=result.payment_id,
            error=result.error,
        ))
        return result

    @staticmethod
    async def list_for_order(db: AsyncSession, order_id: int) -> List[Payment]:
        return await PaymentRepository.list_for_order(db, order_id)
