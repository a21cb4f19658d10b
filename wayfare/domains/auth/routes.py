# wayfare/domains/auth/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.database import get_db
from wayfare.db.models import User
from wayfare.domains.auth.dependencies import get_current_user
from wayfare.domains.auth.models import SessionState
from wayfare.domains.auth.service import SessionService

router = APIRouter(prefix="/session", tags=["Sessions"])


@router.get(
    "",
    response_model=SessionState,
    operation_id="getSessionState",
)
async def get_session_state(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)
) -> SessionState:
    service = SessionService(db)
    return await service.get_session_state(user)
