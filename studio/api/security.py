from fastapi import HTTPException, Request, status
from typing import Optional
import logging

from tryon.auth import decode_access_token
from tryon.exceptions import AuthenticationError


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization") or ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    token = token.strip()
    # Browsers that never logged in send the literal string "null"
    if token in {"null", "undefined"}:
        return None
    return token


async def get_current_user_id(request: Request) -> str:
    """
    Dependency that resolves the caller's user id from the ``Authorization: Bearer <jwt>``
    header. Raises 401 when the header is missing or the token does not verify.
    """
    token = _bearer_token(request)
    if not token:
        logging.warning("Missing bearer token.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Missing bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = decode_access_token(token)
    except AuthenticationError as e:
        logging.warning(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = str(claims.get("id") or claims.get("sub"))
    logging.debug(f"Authenticated user via bearer token: {user_id}")
    return user_id


async def get_optional_user_id(request: Request) -> Optional[str]:
    """
    Optional version of the authentication dependency. Anonymous callers and
    unverifiable tokens resolve to None instead of raising.
    """
    token = _bearer_token(request)
    if not token:
        return None
    try:
        claims = decode_access_token(token)
    except AuthenticationError as e:
        logging.info(f"Ignoring unusable bearer token on optional route: {e}")
        return None
    return str(claims.get("id") or claims.get("sub"))
