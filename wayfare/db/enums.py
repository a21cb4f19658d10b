from enum import Enum


class AgencyRole(str, Enum):
    owner = "owner"  # Full access, can manage agency and members
    admin = "admin"  # Can manage trips, bookings, and view analytics
    manager = "manager"  # Can create/edit trips and manage bookings
    agent = "agent"  # Can create bookings and view assigned trips
    editor = "editor"  # Can edit trip content but not pricing
    viewer = "viewer"  # Read-only access to trips and basic analytics


class MemberStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    pending = "pending"


class InvitationStatus(str, Enum):
    pending = "pending"  # Awaiting response
    accepted = "accepted"  # User accepted, membership created
    expired = "expired"  # Redemption attempted past expires_at
    canceled = "canceled"  # Withdrawn by an agency member


# Roles an invitation or a member update may assign
ASSIGNABLE_ROLES = frozenset(role for role in AgencyRole if role != AgencyRole.owner)
