"""
Shared-secret bearer authentication.

Tokens are opaque strings compared exactly against the configured allow-list.
There is no expiry or rotation.
"""

from typing import Optional

import structlog
from fastapi import Header
from fastapi import Request

from actors_api.errors import UnauthenticatedError

logger = structlog.get_logger(__name__)

BEARER_PREFIX = "Bearer "


def is_allowed_token(token: str, allowed_keys: list) -> bool:
    if not allowed_keys:
        logger.warning("no_api_keys_configured")
        return False
    return token in allowed_keys


async def require_api_key(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> str:
    """
    FastAPI dependency that rejects requests without a known bearer token.

    Raises:
        UnauthenticatedError: For a missing header, a header that is not a
            bearer credential, an empty token or an unknown token
    """
    if authorization is None:
        raise UnauthenticatedError("Missing Authorization header")

    if not authorization.lower().startswith(BEARER_PREFIX.lower()):
        raise UnauthenticatedError("Invalid Authorization header format")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthenticatedError("Missing token")

    if not is_allowed_token(token, request.app.state.settings.api_keys):
        logger.info("invalid_token", path=request.url.path)
        raise UnauthenticatedError("Invalid token")

    return token
