from enum import Enum
from typing import Iterable, Mapping, Set

from pydantic import BaseModel, ConfigDict

from wayfare.db.enums import AgencyRole


class Permission(Enum):
    """
    Defines all permissions a member can hold within an agency.

    Permissions follow the pattern: ACTION_RESOURCE
    Values match the field names of PermissionSet.
    """

    # Trip management
    CREATE_TRIPS = "create_trips"
    EDIT_TRIPS = "edit_trips"
    DELETE_TRIPS = "delete_trips"
    MANAGE_PRICING = "manage_pricing"

    # Booking management
    CREATE_BOOKINGS = "create_bookings"
    EDIT_BOOKINGS = "edit_bookings"
    CANCEL_BOOKINGS = "cancel_bookings"
    PROCESS_PAYMENTS = "process_payments"

    # Agency management
    MANAGE_MEMBERS = "manage_members"  # Invite, update, remove members
    MANAGE_SETTINGS = "manage_settings"  # Update agency profile and settings
    VIEW_ANALYTICS = "view_analytics"
    EXPORT_DATA = "export_data"

    # Content management
    MANAGE_LOCATIONS = "manage_locations"
    MANAGE_ITINERARIES = "manage_itineraries"


class PermissionSet(BaseModel):
    """A fully specified set of permission flags. Every flag defaults to False."""

    model_config = ConfigDict(extra="forbid")

    create_trips: bool = False
    edit_trips: bool = False
    delete_trips: bool = False
    manage_pricing: bool = False
    create_bookings: bool = False
    edit_bookings: bool = False
    cancel_bookings: bool = False
    process_payments: bool = False
    manage_members: bool = False
    manage_settings: bool = False
    view_analytics: bool = False
    export_data: bool = False
    manage_locations: bool = False
    manage_itineraries: bool = False

    @classmethod
    def from_permissions(cls, permissions: Iterable[Permission]) -> "PermissionSet":
        return cls(**{permission.value: True for permission in permissions})

    @classmethod
    def full(cls) -> "PermissionSet":
        return cls.from_permissions(Permission)

    @classmethod
    def from_stored(cls, flags: Mapping[str, bool] | None) -> "PermissionSet":
        """Build from a stored flag mapping, ignoring keys no longer in the vocabulary."""
        known = {p.value for p in Permission}
        return cls(**{k: bool(v) for k, v in (flags or {}).items() if k in known})

    def allows(self, permission: Permission) -> bool:
        return bool(getattr(self, permission.value))

    def granted(self) -> Set[Permission]:
        return {permission for permission in Permission if self.allows(permission)}


ROLE_PERMISSIONS: dict[AgencyRole, Set[Permission]] = {
    AgencyRole.admin: {
        # Admins have everything except member and settings management
        Permission.CREATE_TRIPS,
        Permission.EDIT_TRIPS,
        Permission.DELETE_TRIPS,
        Permission.MANAGE_PRICING,
        Permission.CREATE_BOOKINGS,
        Permission.EDIT_BOOKINGS,
        Permission.CANCEL_BOOKINGS,
        Permission.PROCESS_PAYMENTS,
        Permission.VIEW_ANALYTICS,
        Permission.EXPORT_DATA,
        Permission.MANAGE_LOCATIONS,
        Permission.MANAGE_ITINERARIES,
    },
    AgencyRole.manager: {
        Permission.CREATE_TRIPS,
        Permission.EDIT_TRIPS,
        Permission.MANAGE_PRICING,
        Permission.CREATE_BOOKINGS,
        Permission.EDIT_BOOKINGS,
        Permission.CANCEL_BOOKINGS,
        Permission.VIEW_ANALYTICS,
        Permission.MANAGE_LOCATIONS,
        Permission.MANAGE_ITINERARIES,
    },
    AgencyRole.agent: {
        Permission.CREATE_BOOKINGS,
        Permission.EDIT_BOOKINGS,
        Permission.VIEW_ANALYTICS,
    },
    AgencyRole.editor: {
        # Content only, no pricing
        Permission.EDIT_TRIPS,
        Permission.MANAGE_LOCATIONS,
        Permission.MANAGE_ITINERARIES,
    },
    AgencyRole.viewer: {
        Permission.VIEW_ANALYTICS,
    },
}


def default_permissions(role: AgencyRole | str) -> PermissionSet:
    """
    Resolve the template permission set for a role.

    Unknown roles, and the owner role (which is never templated), yield the
    all-false set.
    """
    try:
        resolved = AgencyRole(role)
    except ValueError:
        return PermissionSet()
    return PermissionSet.from_permissions(ROLE_PERMISSIONS.get(resolved, set()))
