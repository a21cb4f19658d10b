from typing import Awaitable, Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.database import get_db
from wayfare.db.models import Member
from wayfare.domains.auth.dependencies import get_caller
from wayfare.domains.auth.models import Caller

from .models import Permission
from .services import authorize


def require_permission(
    permission: Permission,
) -> Callable[..., Awaitable[Member]]:
    """
    Dependency factory for permission-based authorization.

    Creates a dependency that validates the caller holds the specified
    permission in the agency named by the ``agency_id`` path parameter.

    Args:
        permission: The permission required to access the endpoint

    Returns:
        Async dependency function that validates permission and returns membership
    """

    async def check_permission(
        agency_id: str,
        caller: Caller = Depends(get_caller),
        db: AsyncSession = Depends(get_db),
    ) -> Member:
        return await authorize(db, agency_id, caller, permission)

    return check_permission
