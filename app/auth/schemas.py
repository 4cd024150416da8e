from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr

from app.core.enums import AppRole, Portal


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserInfo(BaseModel):
    id: UUID
    name: Optional[str] = None
    email: EmailStr
    roles: List[AppRole]
    portal: Portal


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo
    issued_at: datetime


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated user for role checks."""

    id: UUID
    email: str
    roles: List[AppRole]

    @property
    def portal(self) -> Portal:
        return resolve_portal(self.roles)

    def has_role(self, *roles: AppRole) -> bool:
        return any(r in self.roles for r in roles)


def resolve_portal(roles: List[AppRole]) -> Portal:
    """Parent wins over admin for the landing view; plain 'user' gets the admin views."""
    if AppRole.parent in roles:
        return Portal.PARENT
    if AppRole.admin in roles or AppRole.user in roles:
        return Portal.ADMIN
    return Portal.UNASSIGNED
