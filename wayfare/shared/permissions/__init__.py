"""
Shared permission system for agency access control.

Usage:
    from wayfare.shared.permissions import Permission, require_permission

    @router.get("/{agency_id}/resource")
    async def get_resource(
        membership: Member = Depends(require_permission(Permission.VIEW_ANALYTICS))
    ):
        pass
"""

from .dependencies import require_permission
from .models import ROLE_PERMISSIONS, Permission, PermissionSet, default_permissions
from .services import authorize, check_permission, has_permission, require_owner

__all__ = [
    "Permission",
    "PermissionSet",
    "ROLE_PERMISSIONS",
    "authorize",
    "check_permission",
    "default_permissions",
    "has_permission",
    "require_owner",
    "require_permission",
]
