from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import InvalidStatusTransitionError, NotFoundError, ValidationError
from shared.security.dependencies import get_current_admin, get_current_user

from .schemas import ReturnCreate, ReturnResponse, ReturnStatusUpdate
from .service import ReturnService
from .status import ReturnStatus

router = APIRouter()
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "return", "status": "running"}


@router.post("/", response_model=ReturnResponse, status_code=status.HTTP_201_CREATED)
async def create_return(
    payload: ReturnCreate,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await ReturnService.create_return(db, user_id, payload)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=List[ReturnResponse])
async def list_my_returns(
    user_id: int = Depends(get_current_user), db: AsyncSession = Depends(get_db)
):
    return await ReturnService.list_user_returns(db, user_id)


@router.get("/admin/all", response_model=List[ReturnResponse])
async def list_all_returns(
    status: Optional[ReturnStatus] = None,
    _: int = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ReturnService.list_returns(db, status)


@router.get("/{return_id}", response_model=ReturnResponse)
async def get_return(
    return_id: int,
    request: Request,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await ReturnService.get_return_for_user(
            db, return_id, user_id, is_admin=request.state.is_admin
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Return not found")


@router.patch("/{return_id}/status", response_model=ReturnResponse)
async def update_status(
    return_id: int,
    payload: ReturnStatusUpdate,
    _: int = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await ReturnService.update_status(db, return_id, payload.status, payload.admin_notes)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Return not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
