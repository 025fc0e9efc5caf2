"""Role checks layered on top of ``get_current_user``."""

from typing import Annotated

from fastapi import Depends

from inkblog.dependencies.dependencies import get_current_user
from inkblog.errors import ForbiddenError
from inkblog.models import ADMIN_ROLES, Role
from inkblog.schemas.user import UserRecord


async def require_admin(
    user: Annotated[UserRecord, Depends(get_current_user)],
) -> UserRecord:
    """
    Dependency that requires the ADMIN or SUPER_ADMIN role.

    Raises
    ------
    ForbiddenError
        If the user is a regular user.
    """
    if user.role not in ADMIN_ROLES:
        mssg = "Admin access required"
        raise ForbiddenError(mssg)
    return user


async def require_super_admin(
    user: Annotated[UserRecord, Depends(get_current_user)],
) -> UserRecord:
    if user.role != Role.SUPER_ADMIN:
        mssg = "Super admin access required"
        raise ForbiddenError(mssg)
    return user


AdminUserDep = Annotated[UserRecord, Depends(require_admin)]
SuperAdminUserDep = Annotated[UserRecord, Depends(require_super_admin)]
