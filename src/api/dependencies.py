"""FastAPI dependencies for authentication and shared resources."""

import secrets
from collections.abc import Iterator
from sqlite3 import Connection

from fastapi import Header, HTTPException, status

from core.config import DB_PATH, HOURVEST_API_KEY, USER_ROLES
from core.database import get_connection
from models.users import UserContext


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not HOURVEST_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, HOURVEST_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key


async def get_current_user(
    x_user_id: str = Header(..., alias="X-User-Id"),
    x_user_role: str = Header("student", alias="X-User-Role"),
) -> UserContext:
    """
    Acting user as asserted by the identity provider in front of the API.

    Raises:
        HTTPException: 401 if the user id is blank or the role is unknown
    """
    user_id = x_user_id.strip()
    role = x_user_role.strip().lower()
    if not user_id or role not in USER_ROLES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid user identity",
                "code": "UNAUTHORIZED",
                "details": [f"Role must be one of: {', '.join(sorted(USER_ROLES))}"],
            },
        )
    return UserContext(user_id=user_id, role=role)


def get_db() -> Iterator[Connection]:
    """Per-request database connection."""
    conn = get_connection(DB_PATH)
    try:
        yield conn
    finally:
        conn.close()
