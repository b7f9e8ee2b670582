from typing import Optional, Protocol

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from .models import KeyValueEntry


class Storage(Protocol):
    """Key-value persistence the cart store writes through."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage. State is lost when the process exits."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class DatabaseStorage:
    """Storage backed by the kv_store table, so carts survive restarts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, key: str) -> Optional[str]:
        entry = await self.db.get(KeyValueEntry, key)
        return entry.value if entry else None

    async def set(self, key: str, value: str) -> None:
        entry = await self.db.get(KeyValueEntry, key)
        if entry:
            entry.value = value
        else:
            self.db.add(KeyValueEntry(key=key, value=value))
        await self.db.commit()

    async def delete(self, key: str) -> None:
        await self.db.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
        await self.db.commit()
