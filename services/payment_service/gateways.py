"""Payment gateway boundary.

The checkout pipeline only talks to the ``PaymentGateway`` protocol, so a
real gateway SDK can replace ``SimulatedGateway`` without touching it.
"""
import asyncio
import secrets
import time
from typing import Optional, Protocol

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


class CustomerDetails(BaseModel):
    name: str
    email: str = ""
    phone: str = ""


class PaymentRequest(BaseModel):
    amount: float
    currency: str
    payment_method: str
    order_id: int
    customer: CustomerDetails


class PaymentResult(BaseModel):
    success: bool
    payment_id: Optional[str] = None
    error: Optional[str] = None
    redirect_url: Optional[str] = None


class PaymentGateway(Protocol):
    async def process_payment(self, request: PaymentRequest) -> PaymentResult: ...

    async def verify_payment(self, payment_id: str, order_id: int) -> bool: ...

    async def refund_payment(self, payment_id: str, amount: float, reason: str) -> PaymentResult: ...


def _synthetic_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class SimulatedGateway:
    """Approves every supported method after a fixed delay. No money moves."""

    PREFIXES = {
        "credit_card": "card",
        "debit_card": "card",
        "upi": "upi",
        "net_banking": "netbanking",
    }

    def __init__(self, delay: float = 0.0):
        self.delay = delay

    async def process_payment(self, request: PaymentRequest) -> PaymentResult:
        prefix = self.PREFIXES.get(request.payment_method)
        if prefix is None:
            logger.warning("payment_method_unsupported", method=request.payment_method)
            return PaymentResult(success=False, error="Unsupported payment method")

        if self.delay:
            await asyncio.sleep(self.delay)

        payment_id = _synthetic_id(prefix)
        logger.info(
            "payment_approved",
            order_id=request.order_id,
            method=request.payment_method,
            amount=request.amount,
            payment_id=payment_id,
        )
        return PaymentResult(success=True, payment_id=payment_id)

    async def verify_payment(self, payment_id: str, order_id: int) -> bool:
        return bool(payment_id)

    async def refund_payment(self, payment_id: str, amount: float, reason: str) -> PaymentResult:
        refund_id = _synthetic_id("refund")
        logger.info("payment_refunded", payment_id=payment_id, amount=amount, reason=reason)
        return PaymentResult(success=True, payment_id=refund_id)
