from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from .models import Payment

class PaymentRepository:
    @staticmethod
    async def create_payment(db: AsyncSession, payment: Payment):
        db.add(payment)
        await db.commit()
        await db.refresh(payment)
        return payment

    @staticmethod
    async def list_for_order(db: AsyncSession, order_id: int) -> List[Payment]:
        result = await db.execute(
            select(Payment).where(Payment.order_id == order_id).order_by(Payment.id)
        )
        return list(result.scalars().all())
