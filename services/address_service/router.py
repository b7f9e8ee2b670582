from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import NotFoundError
from shared.security.dependencies import get_current_user

from .schemas import SavedAddressCreate, SavedAddressResponse, SavedAddressUpdate
from .service import AddressService

router = APIRouter()
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "address", "status": "running"}


@router.get("/", response_model=List[SavedAddressResponse])
async def list_addresses(
    user_id: int = Depends(get_current_user), db: AsyncSession = Depends(get_db)
):
    return await AddressService.list_addresses(db, user_id)


@router.post("/", response_model=SavedAddressResponse, status_code=status.HTTP_201_CREATED)
async def create_address(
    payload: SavedAddressCreate,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AddressService.create_address(db, user_id, payload)


@router.patch("/{address_id}", response_model=SavedAddressResponse)
async def update_address(
    address_id: int,
    payload: SavedAddressUpdate,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await AddressService.update_address(db, address_id, user_id, payload)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Address not found")


@router.post("/{address_id}/default", response_model=SavedAddressResponse)
async def set_default(
    address_id: int,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await AddressService.set_default(db, address_id, user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Address not found")


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(
    address_id: int,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await AddressService.delete_address(db, address_id, user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Address not found")
