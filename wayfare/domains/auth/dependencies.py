# wayfare/domains/auth/dependencies.py
import logging
from typing import Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWKClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.database import get_db
from wayfare.core.settings import settings
from wayfare.db.models import User
from wayfare.shared.exceptions import (
    ConfigurationError,
    InvalidTokenError,
    UnauthenticatedError,
)

from .models import Caller
from .types import AuthJwtPayload

logger = logging.getLogger(__name__)

_jwks_client = PyJWKClient(settings.AUTH_JWKS_URL) if settings.AUTH_JWKS_URL else None


def decode_jwt(token: str) -> AuthJwtPayload:
    """
    Verifies JWT token. Uses JWT_SECRET for development mode if available,
    otherwise falls back to the identity provider JWKS for production.
    """
    # Development mode: prefer JWT_SECRET if available
    if settings.JWT_SECRET:
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=["HS256"],
                options={"verify_aud": False},
            )
            return AuthJwtPayload(**dict(payload))
        except jwt.PyJWTError:
            raise InvalidTokenError()

    # Production mode: use JWKS
    if not _jwks_client:
        raise ConfigurationError("Authentication is not configured")
    try:
        signing_key = _jwks_client.get_signing_key_from_jwt(token).key
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=["RS256"],
            options={"verify_aud": False},
        )
        return AuthJwtPayload(**dict(payload))
    except jwt.PyJWTError:
        raise InvalidTokenError()


def get_token_payload(authorization: str = Header(None)) -> AuthJwtPayload:
    """
    Extracts and validates the JWT from the Authorization header.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthenticatedError("Missing token")

    token = authorization.split(" ")[1]
    payload = decode_jwt(token)
    if not payload.sub:
        raise InvalidTokenError()
    return payload


async def get_current_user(
    payload: AuthJwtPayload = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Finds the user linked to the token subject, provisioning it on first sight.

    Profile claims (email, verification, name) are refreshed from the token.
    """
    result = await db.execute(select(User).where(User.auth_id == payload.sub))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(auth_id=payload.sub)
        db.add(user)
        logger.info(f"Provisioning user for subject {payload.sub}")

    user.email = payload.email.strip().lower() if payload.email else user.email
    user.email_verified = bool(payload.email_verified)
    user.name = payload.name or user.name
    user.image = payload.picture or user.image

    await db.commit()
    return user


async def get_caller(user: User = Depends(get_current_user)) -> Caller:
    """The explicit caller context for service operations."""
    return Caller.from_user(user)


async def get_optional_caller(
    authorization: str = Header(None), db: AsyncSession = Depends(get_db)
) -> Optional[Caller]:
    """Like get_caller, but yields None for anonymous or invalid credentials."""
    try:
        payload = get_token_payload(authorization)
    except UnauthenticatedError:
        return None
    except ConfigurationError:
        logger.warning("Ignoring bearer token: authentication is not configured")
        return None
    user = await get_current_user(payload, db)
    return Caller.from_user(user)
