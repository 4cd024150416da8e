from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User, UserRole
from app.auth.schemas import LoginRequest, LoginResponse, UserInfo, resolve_portal
from app.auth.security import create_access_token, verify_password
from app.core.enums import AppRole
from app.core.exceptions import ServiceError
from app.core.logger import log


async def get_user_roles(db: AsyncSession, user_id: UUID) -> List[AppRole]:
    result = await db.execute(
        select(UserRole.role).where(UserRole.user_id == user_id).order_by(UserRole.role)
    )
    roles: List[AppRole] = []
    for (role,) in result.all():
        try:
            roles.append(AppRole(role))
        except ValueError:
            log.warning(f"Ignoring unknown role {role!r} for user {user_id}")
    return roles


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    # 1. Find user by email (case-insensitive)
    user_stmt = select(User).where(func.lower(User.email) == func.lower(payload.email))
    user_result = await db.execute(user_stmt)
    user: Optional[User] = user_result.scalar_one_or_none()
    if not user:
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # 2. Verify password hash
    if not verify_password(payload.password, user.password_hash):
        log.warning(f"Failed login for {payload.email}")
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # 3. Roles decide the portal; a user without roles can log in but sees nothing
    roles = await get_user_roles(db, user.id)

    issued_at = datetime.now(timezone.utc)
    access_payload = {
        "sub": str(user.id),
        "user_id": str(user.id),
        "email": user.email,
        "iat": int(issued_at.timestamp()),
    }
    access_token = create_access_token(subject=access_payload)

    return LoginResponse(
        access_token=access_token,
        user=UserInfo(
            id=user.id,
            name=user.full_name,
            email=user.email,
            roles=roles,
            portal=resolve_portal(roles),
        ),
        issued_at=issued_at,
    )


async def get_user_info(db: AsyncSession, user_id: UUID) -> UserInfo:
    user = await db.get(User, user_id)
    if not user:
        raise ServiceError("User not found", status.HTTP_404_NOT_FOUND)
    roles = await get_user_roles(db, user.id)
    return UserInfo(
        id=user.id,
        name=user.full_name,
        email=user.email,
        roles=roles,
        portal=resolve_portal(roles),
    )
