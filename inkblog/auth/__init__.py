"""Authentication and authorization module."""

from inkblog.auth.permissions import (
    AdminUserDep,
    SuperAdminUserDep,
    require_admin,
    require_super_admin,
)

__all__ = [
    "AdminUserDep",
    "SuperAdminUserDep",
    "require_admin",
    "require_super_admin",
]
