"""
Shared-secret authentication for the archive endpoint.

The archive is protected by a single static token (``ARCHIVE_TOKEN``)
sent as ``Authorization: Bearer <token>``.  There are no users,
sessions or expiry.  The check runs as a FastAPI dependency, so a
rejected request never reaches the storage layer.
"""

import logging
import secrets

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .exceptions import UnauthorizedError


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def token_matches(presented: str, expected: str) -> bool:
    """Exact comparison in constant time.  An empty expected token never matches."""
    if not expected or not presented:
        return False
    return secrets.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def require_archive_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> None:
    """Dependency that rejects requests without the archive token.

    Raises
    ------
    UnauthorizedError
        If the header is missing, uses another scheme, or carries the
        wrong token.
    """
    expected = request.app.state.settings.archive_token
    if credentials is None:
        logger.warning("Archive request without bearer credentials from %s", _client(request))
        raise UnauthorizedError()
    if not token_matches(credentials.credentials, expected):
        logger.warning("Archive request with invalid token from %s", _client(request))
        raise UnauthorizedError()


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"
