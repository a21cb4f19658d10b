# wayfare/domains/agencies/routes.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.database import get_db
from wayfare.db.models import Member
from wayfare.domains.agencies.models import (
    AgencyCreate,
    AgencyResponse,
    AgencyStats,
    AgencyUpdate,
    CreateAgencyResponse,
    UserAgencyResponse,
)
from wayfare.domains.agencies.service import AgencyService
from wayfare.domains.auth.dependencies import get_caller
from wayfare.domains.auth.models import Caller
from wayfare.domains.members.models import ActionResponse
from wayfare.shared.permissions import Permission, require_permission

router = APIRouter(prefix="/agencies", tags=["Agencies"])


@router.put(
    "/",
    response_model=CreateAgencyResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createAgency",
)
async def create_agency(
    agency_data: AgencyCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> CreateAgencyResponse:
    """Create a new agency and add the current user as owner."""
    service = AgencyService(db)
    return await service.create_agency(agency_data, caller)


@router.get(
    "/",
    response_model=List[UserAgencyResponse],
    operation_id="getUserAgencies",
)
async def get_user_agencies(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> List[UserAgencyResponse]:
    """List the agencies the current user is an active member of."""
    service = AgencyService(db)
    return await service.list_user_agencies(caller)


@router.get(
    "/{agency_id}",
    response_model=AgencyResponse,
    operation_id="getAgency",
)
async def get_agency(
    agency_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> AgencyResponse:
    service = AgencyService(db)
    return await service.get_agency(agency_id, caller)


@router.patch(
    "/{agency_id}",
    response_model=AgencyResponse,
    operation_id="updateAgency",
)
async def update_agency(
    agency_id: str,
    updates: AgencyUpdate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> AgencyResponse:
    """Update the agency profile. Requires manage_settings."""
    service = AgencyService(db)
    return await service.update_agency(agency_id, updates, caller)


@router.delete(
    "/{agency_id}",
    response_model=ActionResponse,
    operation_id="deleteAgency",
)
async def delete_agency(
    agency_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> ActionResponse:
    """
    Delete an agency together with its members and invitations.

    Only the agency owner may do this.
    """
    service = AgencyService(db)
    await service.delete_agency(agency_id, caller)
    return ActionResponse()


@router.get(
    "/{agency_id}/stats",
    response_model=AgencyStats,
    operation_id="getAgencyStats",
)
async def get_agency_stats(
    agency_id: str,
    membership: Member = Depends(require_permission(Permission.VIEW_ANALYTICS)),
    db: AsyncSession = Depends(get_db),
) -> AgencyStats:
    service = AgencyService(db)
    return await service.get_agency_stats(agency_id)
