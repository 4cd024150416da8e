from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import AppRole


def require_roles(*roles: AppRole):
    """
    Dependency factory: the caller must hold at least one of ``roles``.

    Example:
        Depends(require_roles(AppRole.admin, AppRole.user))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not current_user.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _checker


# Privileged account actions and guardian linking
require_admin = require_roles(AppRole.admin)
# Catalogs and ledger operations
require_staff = require_roles(AppRole.admin, AppRole.user)
# Parent portal
require_parent = require_roles(AppRole.parent)
