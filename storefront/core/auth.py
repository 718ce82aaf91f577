"""Bearer token authentication dependencies.

Protected routes depend on ``get_current_user``; admin routes additionally
depend on ``require_admin``:

    @router.get("/orders", dependencies=[Depends(require_admin)])
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header, Request

from storefront.adapters.store.base import UserRecord
from storefront.core.errors import AuthenticationAppError, PermissionAppError
from storefront.core.security import decode_access_token

logger = logging.getLogger(__name__)


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Examples:
        >>> parse_bearer_token("Bearer abc")
        'abc'
        >>> parse_bearer_token("Basic abc") is None
        True
        >>> parse_bearer_token(None) is None
        True
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> UserRecord:
    """FastAPI dependency resolving the authenticated user.

    Raises:
        AuthenticationAppError: Missing/invalid token or the user no longer exists.
    """
    token = parse_bearer_token(authorization)
    if token is None:
        logger.warning("auth.missing_token", extra={"path": request.url.path})
        raise AuthenticationAppError(code="missing_token", message="Not authorized, no token")

    user_id = decode_access_token(token)
    user = request.app.state.users.find_by_id(user_id)
    if user is None:
        logger.warning("auth.unknown_subject", extra={"user_id": user_id})
        raise AuthenticationAppError(code="invalid_token", message="Not authorized, token failed")
    return user


async def require_admin(user: Annotated[UserRecord, Depends(get_current_user)]) -> UserRecord:
    """FastAPI dependency that only lets administrators through.

    Raises:
        PermissionAppError: The authenticated user is not an admin.
    """
    if not user.is_admin:
        logger.warning("auth.admin_required", extra={"user_id": user.id})
        raise PermissionAppError(code="admin_required", message="Not authorized as an admin")
    return user


CurrentUser = Annotated[UserRecord, Depends(get_current_user)]
AdminUser = Annotated[UserRecord, Depends(require_admin)]
