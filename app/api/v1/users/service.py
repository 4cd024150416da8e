"""
User administration: account creation, password reset, deletion and role assignment.

Every action requires the acting user to hold the admin role.
"""

from typing import Dict, List
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User, UserRole
from app.auth.schemas import CurrentUser, resolve_portal
from app.auth.security import hash_password
from app.core.enums import AppRole
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.logger import log
from app.core.models import StudentGuardian

from .schemas import ActionResult, PasswordReset, RoleAssign, UserCreate, UserListItem

MIN_PASSWORD_LENGTH = 6


def _ensure_admin(actor: CurrentUser) -> None:
    if not actor.has_role(AppRole.admin):
        log.warning(f"User {actor.id} attempted a user administration action without admin role")
        raise AuthorizationError()


def _check_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


async def _get_user(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def create_user(db: AsyncSession, actor: CurrentUser, payload: UserCreate) -> ActionResult:
    _ensure_admin(actor)
    _check_password(payload.password)
    email = payload.email.strip().lower()
    existing = await db.execute(select(User.id).where(func.lower(User.email) == email))
    if existing.scalar_one_or_none() is not None:
        raise ValidationError("Email is already registered")

    try:
        user = User(
            email=email,
            full_name=(payload.full_name or "").strip() or None,
            password_hash=hash_password(payload.password),
        )
        db.add(user)
        await db.flush()
        if payload.role is not None:
            db.add(UserRole(user_id=user.id, role=payload.role.value))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Email is already registered")

    log.info(f"User {user.id} created by {actor.id} with role {payload.role.value if payload.role else None}")
    return ActionResult(message="User created successfully", user_id=user.id)


async def reset_password(
    db: AsyncSession,
    actor: CurrentUser,
    user_id: UUID,
    payload: PasswordReset,
) -> ActionResult:
    _ensure_admin(actor)
    _check_password(payload.new_password)
    user = await _get_user(db, user_id)
    user.password_hash = hash_password(payload.new_password)
    await db.commit()
    log.info(f"Password of user {user_id} reset by {actor.id}")
    return ActionResult(message="Password updated successfully", user_id=user_id)


async def delete_user(db: AsyncSession, actor: CurrentUser, user_id: UUID) -> ActionResult:
    _ensure_admin(actor)
    if user_id == actor.id:
        raise ValidationError("You cannot delete your own account")
    user = await _get_user(db, user_id)
    await db.execute(delete(StudentGuardian).where(StudentGuardian.guardian_user_id == user_id))
    await db.execute(delete(UserRole).where(UserRole.user_id == user_id))
    await db.delete(user)
    await db.commit()
    log.info(f"User {user_id} deleted by {actor.id}")
    return ActionResult(message="User deleted successfully", user_id=user_id)


async def assign_role(
    db: AsyncSession,
    actor: CurrentUser,
    user_id: UUID,
    payload: RoleAssign,
) -> ActionResult:
    """Replace the user's roles with the given one."""
    _ensure_admin(actor)
    await _get_user(db, user_id)
    await db.execute(delete(UserRole).where(UserRole.user_id == user_id))
    if payload.role is not None:
        db.add(UserRole(user_id=user_id, role=payload.role.value))
    await db.commit()
    return ActionResult(message="Role updated successfully", user_id=user_id)


async def list_users(db: AsyncSession, actor: CurrentUser) -> List[UserListItem]:
    _ensure_admin(actor)
    users = (await db.execute(select(User).order_by(User.email))).scalars().all()
    role_rows = (await db.execute(select(UserRole.user_id, UserRole.role))).all()
    roles_by_user: Dict[UUID, List[AppRole]] = {}
    for uid, role in role_rows:
        try:
            roles_by_user.setdefault(uid, []).append(AppRole(role))
        except ValueError:
            continue
    items = []
    for u in users:
        roles = sorted(roles_by_user.get(u.id, []), key=lambda r: r.value)
        items.append(
            UserListItem(
                id=u.id,
                email=u.email,
                full_name=u.full_name,
                roles=roles,
                portal=resolve_portal(roles),
                created_at=u.created_at,
            )
        )
    return items
