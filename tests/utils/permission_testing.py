"""
Dynamic permission testing utilities.

These utilities derive expected permissions and role mappings from the
actual Permission enum and ROLE_PERMISSIONS, so tests keep working when new
permissions are added.
"""

from typing import Dict, Set

from wayfare.db.enums import AgencyRole
from wayfare.shared.permissions.models import (
    ROLE_PERMISSIONS,
    Permission,
    default_permissions,
)


class PermissionTestHelpers:
    """Helper class for dynamic permission testing."""

    @staticmethod
    def get_all_permissions() -> Set[Permission]:
        return set(Permission)

    @staticmethod
    def get_role_permissions(role: AgencyRole) -> Set[Permission]:
        return ROLE_PERMISSIONS.get(role, set())

    @staticmethod
    def get_permissions_by_category() -> Dict[str, Set[Permission]]:
        """
        Categorize permissions by the resource they act on.

        Categories are derived from permission names (the part after the
        first underscore), e.g. CREATE_TRIPS -> "trips".
        """
        categories: Dict[str, Set[Permission]] = {}
        for permission in Permission:
            parts = permission.name.split("_", 1)
            category = parts[1].lower() if len(parts) > 1 else "misc"
            categories.setdefault(category, set()).add(permission)
        return categories

    @staticmethod
    def get_manage_permissions() -> Set[Permission]:
        return {p for p in Permission if p.name.startswith("MANAGE_")}

    @staticmethod
    def get_destructive_permissions() -> Set[Permission]:
        """
        Permissions considered high-risk.

        These should be restricted to higher privilege roles.
        """
        destructive = set()
        destructive.update(p for p in Permission if p.name.startswith("DELETE_"))
        destructive.add(Permission.PROCESS_PAYMENTS)
        destructive.add(Permission.MANAGE_MEMBERS)
        return destructive

    @staticmethod
    def assert_template_matches_role(role: AgencyRole) -> None:
        """Assert default_permissions(role) grants exactly ROLE_PERMISSIONS[role]."""
        expected = PermissionTestHelpers.get_role_permissions(role)
        actual = default_permissions(role).granted()

        missing = expected - actual
        unexpected = actual - expected

        error_parts = []
        if missing:
            error_parts.append(f"Missing permissions: {sorted(p.name for p in missing)}")
        if unexpected:
            error_parts.append(
                f"Unexpected permissions: {sorted(p.name for p in unexpected)}"
            )
        if error_parts:
            raise AssertionError(
                f"Role {role.value} template mismatch. " + "; ".join(error_parts)
            )
