from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import ActionResult, PasswordReset, RoleAssign, UserCreate, UserListResult
from . import service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _error(e: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=e.status_code, content={"success": False, "error": e.message})


@router.post("", response_model=ActionResult)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await service.create_user(db, current_user, payload)
    except ServiceError as e:
        return _error(e)


@router.get("", response_model=UserListResult)
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return UserListResult(users=await service.list_users(db, current_user))
    except ServiceError as e:
        return _error(e)


@router.post("/{user_id}/reset-password", response_model=ActionResult)
async def reset_password(
    user_id: UUID,
    payload: PasswordReset,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await service.reset_password(db, current_user, user_id, payload)
    except ServiceError as e:
        return _error(e)


@router.put("/{user_id}/role", response_model=ActionResult)
async def assign_role(
    user_id: UUID,
    payload: RoleAssign,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await service.assign_role(db, current_user, user_id, payload)
    except ServiceError as e:
        return _error(e)


@router.delete("/{user_id}", response_model=ActionResult)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await service.delete_user(db, current_user, user_id)
    except ServiceError as e:
        return _error(e)
