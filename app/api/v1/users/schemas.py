from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr

from app.core.enums import AppRole, Portal


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None
    role: Optional[AppRole] = None


class PasswordReset(BaseModel):
    new_password: str


class RoleAssign(BaseModel):
    """``None`` removes every role and leaves the account unassigned."""

    role: Optional[AppRole] = None


class UserListItem(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    roles: List[AppRole]
    portal: Portal
    created_at: datetime


class ActionResult(BaseModel):
    success: bool = True
    message: str
    user_id: Optional[UUID] = None


class UserListResult(BaseModel):
    success: bool = True
    message: str = "OK"
    users: List[UserListItem]
