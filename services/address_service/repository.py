from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import SavedAddress


class AddressRepository:
    @staticmethod
    async def get(db: AsyncSession, address_id: int) -> Optional[SavedAddress]:
        return await db.get(SavedAddress, address_id)

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: int) -> List[SavedAddress]:
        result = await db.execute(
            select(SavedAddress)
            .where(SavedAddress.user_id == user_id)
            .order_by(SavedAddress.is_default.desc(), SavedAddress.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def count_of_type(db: AsyncSession, user_id: int, address_type: str) -> int:
        result = await db.execute(
            select(SavedAddress.id).where(
                SavedAddress.user_id == user_id, SavedAddress.type == address_type
            )
        )
        return len(result.scalars().all())

    @staticmethod
    async def clear_default(db: AsyncSession, user_id: int, address_type: str) -> None:
        """Unset the default flag without committing."""
        await db.execute(
            update(SavedAddress)
            .where(SavedAddress.user_id == user_id, SavedAddress.type == address_type)
            .values(is_default=False)
        )

    @staticmethod
    async def save(db: AsyncSession, address: SavedAddress) -> SavedAddress:
        db.add(address)
        await db.commit()
        await db.refresh(address)
        return address

    @staticmethod
    async def delete(db: AsyncSession, address_id: int) -> None:
        await db.execute(delete(SavedAddress).where(SavedAddress.id == address_id))
        await db.commit()
