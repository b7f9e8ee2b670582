from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ReturnItem, ReturnRequest
from .status import CLOSED_STATUSES


class ReturnRepository:
    @staticmethod
    async def create(db: AsyncSession, request: ReturnRequest, items: List[ReturnItem]) -> ReturnRequest:
        """The request and its items commit together."""
        request.items = items
        db.add(request)
        await db.commit()
        return await ReturnRepository.get(db, request.id)

    @staticmethod
    async def get(db: AsyncSession, return_id: int) -> Optional[ReturnRequest]:
        result = await db.execute(
            select(ReturnRequest)
            .where(ReturnRequest.id == return_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def get_open_for_order(db: AsyncSession, order_id: int) -> Optional[ReturnRequest]:
        result = await db.execute(
            select(ReturnRequest).where(
                ReturnRequest.order_id == order_id,
                ReturnRequest.status.not_in(CLOSED_STATUSES),
            )
        )
        return result.scalars().first()

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: int) -> List[ReturnRequest]:
        result = await db.execute(
            select(ReturnRequest)
            .where(ReturnRequest.user_id == user_id)
            .order_by(ReturnRequest.created_at.desc(), ReturnRequest.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_all(db: AsyncSession, status: Optional[str] = None) -> List[ReturnRequest]:
        stmt = select(ReturnRequest).order_by(ReturnRequest.created_at.desc(), ReturnRequest.id.desc())
        if status:
            stmt = stmt.where(ReturnRequest.status == status)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def update(db: AsyncSession, request: ReturnRequest, **fields) -> ReturnRequest:
        for name, value in fields.items():
            setattr(request, name, value)
        await db.commit()
        return await ReturnRepository.get(db, request.id)
