"""FastAPI dependencies for authenticated callers."""

from typing import Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError

from .config import settings
from .exceptions import AuthenticationError


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates Bearer tokens.

    Tokens are issued elsewhere; this service only verifies the HS256
    signature and reads the subject that reviews are attributed to.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: User information from validated token

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    try:
        # Expiry is checked by PyJWT when the claim is present
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"]
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {str(e)}")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError(detail="Invalid token payload")

    return {
        "user_id": str(user_id),
        "username": payload.get("username"),
        "email": payload.get("email"),
        "roles": payload.get("roles", []),
    }


RequiredAuth = Depends(get_current_user)
