from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User


class UserRepository:

    @staticmethod
    async def create(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    @staticmethod
    async def list_users(
        db: AsyncSession, search: Optional[str] = None, limit: int = 50, offset: int = 0
    ) -> List[User]:
        """Admin listing, oldest account first. ``search`` matches email or name."""
        stmt = select(User).order_by(User.id).limit(limit).offset(offset)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(func.lower(User.email).like(pattern), func.lower(User.full_name).like(pattern))
            )
        result = await db.execute(stmt)
        return list(result.scalars().all())
