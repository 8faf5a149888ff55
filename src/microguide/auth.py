"""Identity collaborator: bearer JWT to user id."""

from typing import Any, Dict, Optional
from uuid import UUID

import jwt
from fastapi import HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from microguide.config import get_settings

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify a bearer token; raises `jwt.InvalidTokenError`."""
    settings = get_settings()
    return jwt.decode(
        token,
        settings.jwt_public_key or "secret",
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Optional[UUID]:
    """User id when a valid token was sent, otherwise None."""
    user_id = getattr(request.state, "user_id", None)
    if user_id is None and credentials is not None:
        try:
            user_id = decode_token(credentials.credentials).get("sub")
        except jwt.ExpiredSignatureError:
            raise _unauthorized("Token has expired")
        except jwt.InvalidTokenError as e:
            raise _unauthorized(f"Invalid token: {e}")

    if user_id is None:
        return None
    try:
        return UUID(str(user_id))
    except ValueError:
        raise _unauthorized("Invalid user ID format")


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> UUID:
    """Authenticated user id; 401 without a valid token."""
    user_id = await get_optional_user(request, credentials)
    if user_id is None:
        raise _unauthorized("Not authenticated")
    return user_id
