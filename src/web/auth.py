"""JWT validation for FastAPI routes."""

import os

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from web.user_store import get_or_create_user

ALGORITHM = "HS256"
COOKIE_NAME = "token"

# auto_error off: the token may also arrive in a cookie
security = HTTPBearer(auto_error=False)


def _get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT_SECRET not configured",
        )
    return secret


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    """Decode JWT from the Bearer header or the ``token`` cookie; upsert the user."""
    token = credentials.credentials if credentials else request.cookies.get(COOKIE_NAME)
    if not token:
        raise _unauthorized("Access denied. No token provided.")

    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("sub") or payload.get("userId")
    if not user_id:
        raise _unauthorized("Invalid token: missing sub")

    get_or_create_user(user_id, email=payload.get("email"), name=payload.get("name"))
    return {
        "id": str(user_id),
        "email": payload.get("email"),
        "name": payload.get("name"),
    }
