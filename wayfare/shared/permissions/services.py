import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.db.enums import MemberStatus
from wayfare.db.models import Agency, Member
from wayfare.domains.auth.models import Caller
from wayfare.shared.exceptions import PermissionDeniedError, UnauthenticatedError

from .models import Permission, PermissionSet

logger = logging.getLogger(__name__)


def has_permission(member: Optional[Member], permission: Permission) -> bool:
    """
    Check if a membership grants a specific permission.

    Args:
        member: The membership to check, or None when the user is not a member
        permission: The permission to validate

    Returns:
        True only if the membership exists, is active, and has the flag set
    """
    if member is None or member.status != MemberStatus.active:
        return False
    return PermissionSet.from_stored(member.permissions).allows(permission)


async def get_membership(
    db: AsyncSession, agency_id: str, user_id: str
) -> Optional[Member]:
    """Point lookup of the membership for an (agency, user) pair."""
    result = await db.execute(
        select(Member).where(Member.agency_id == agency_id, Member.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def authorize(
    db: AsyncSession,
    agency_id: str,
    caller: Optional[Caller],
    permission: Permission,
) -> Member:
    """
    Require that the caller holds a permission within an agency.

    Args:
        db: Database session
        agency_id: Agency the operation targets
        caller: Authenticated caller, None when anonymous
        permission: The permission required

    Returns:
        The caller's Member record, so callers avoid a second lookup

    Raises:
        UnauthenticatedError: If there is no caller
        PermissionDeniedError: If the caller is not an active member holding the flag
    """
    if caller is None:
        raise UnauthenticatedError()

    membership = await get_membership(db, agency_id, caller.user_id)
    if membership is None or not has_permission(membership, permission):
        logger.warning(
            f"Denied {permission.value} for user {caller.user_id} in agency {agency_id}"
        )
        raise PermissionDeniedError(
            f"Insufficient permissions: {permission.value} required"
        )

    return membership


def require_owner(agency: Agency, caller: Optional[Caller]) -> None:
    """Ownership-gated check, distinct from flag-based authorization."""
    if caller is None:
        raise UnauthenticatedError()
    if agency.owner_id != caller.user_id:
        raise PermissionDeniedError("Only the agency owner can perform this action")


async def check_permission(
    db: AsyncSession,
    agency_id: str,
    caller: Optional[Caller],
    permission_name: str,
) -> bool:
    """Non-throwing permission check used for UI gating."""
    if caller is None:
        return False
    try:
        permission = Permission(permission_name)
    except ValueError:
        return False
    membership = await get_membership(db, agency_id, caller.user_id)
    return has_permission(membership, permission)
