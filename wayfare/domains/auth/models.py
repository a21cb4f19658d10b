# wayfare/domains/auth/models.py
from typing import List, Optional

from pydantic import BaseModel

from wayfare.db.models import User


class Caller(BaseModel):
    """
    Authenticated identity passed explicitly into every operation.

    ``email`` is only populated when the identity provider has verified it.
    """

    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "Caller":
        return cls(
            user_id=user.id,
            email=user.email.lower() if user.email and user.email_verified else None,
            name=user.name,
        )


class AgencyMembership(BaseModel):
    id: str
    name: str
    role: str


class SessionState(BaseModel):
    user_id: str
    user_email: Optional[str]
    user_display_name: Optional[str]
    agencies: List[AgencyMembership]
