from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.schemas import Address
from shared.errors import NotFoundError

from .models import SavedAddress
from .repository import AddressRepository
from .schemas import SavedAddressCreate, SavedAddressUpdate

logger = structlog.get_logger(__name__)


def to_order_address(address: SavedAddress) -> Address:
    """Snapshot for an order; later edits to the book don't reach it."""
    return Address(
        type=address.type,
        full_name=address.full_name,
        phone=address.phone,
        address_line_1=address.address_line_1,
        address_line_2=address.address_line_2,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
        country=address.country,
    )


class AddressService:
    @staticmethod
    async def list_addresses(db: AsyncSession, user_id: int) -> List[SavedAddress]:
        return await AddressRepository.list_for_user(db, user_id)

    @staticmethod
    async def get_address(db: AsyncSession, address_id: int, user_id: int) -> SavedAddress:
        address = await AddressRepository.get(db, address_id)
        if not address or address.user_id != user_id:
            raise NotFoundError("Address", address_id)
        return address

    @staticmethod
    async def create_address(db: AsyncSession, user_id: int, data: SavedAddressCreate) -> SavedAddress:
        """The first address of a type becomes its default."""
        fields = data.model_dump()
        fields["type"] = data.type.value
        if await AddressRepository.count_of_type(db, user_id, fields["type"]) == 0:
            fields["is_default"] = True
        if fields["is_default"]:
            await AddressRepository.clear_default(db, user_id, fields["type"])

        address = await AddressRepository.save(db, SavedAddress(user_id=user_id, **fields))
        logger.info("address_saved", user_id=user_id, address_id=address.id, type=address.type)
        return address

    @staticmethod
    async def update_address(
        db: AsyncSession, address_id: int, user_id: int, data: SavedAddressUpdate
    ) -> SavedAddress:
        address = await AddressService.get_address(db, address_id, user_id)
        for name, value in data.model_dump(exclude_unset=True).items():
            setattr(address, name, value)
        return await AddressRepository.save(db, address)

    @staticmethod
    async def set_default(db: AsyncSession, address_id: int, user_id: int) -> SavedAddress:
        """One default per (user, type)."""
        address = await AddressService.get_address(db, address_id, user_id)
        await AddressRepository.clear_default(db, user_id, address.type)
        address.is_default = True
        return await AddressRepository.save(db, address)

    @staticmethod
    async def delete_address(db: AsyncSession, address_id: int, user_id: int) -> None:
        address = await AddressService.get_address(db, address_id, user_id)
        await AddressRepository.delete(db, address.id)
        logger.info("address_deleted", user_id=user_id, address_id=address_id)

    @staticmethod
    async def snapshot_for_order(db: AsyncSession, address_id: int, user_id: int) -> Address:
        return to_order_address(await AddressService.get_address(db, address_id, user_id))
