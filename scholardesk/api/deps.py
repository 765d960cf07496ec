"""
API Dependencies.
Database sessions and the authenticated admin context.
"""

import logging
from dataclasses import dataclass
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from scholardesk.core.config import settings
from scholardesk.core.database import get_db
from scholardesk.core.security import decode_token


# Logger
logger = logging.getLogger(__name__)

# Bearer token security scheme
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminContext:
    """Identity of the administrator behind a request."""

    username: str
    role: str


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AdminContext:
    """
    Resolve the admin context from the JWT bearer token.

    Args:
        credentials: Bearer JWT

    Returns:
        AdminContext of the authenticated administrator

    Raises:
        HTTPException: If the token is missing, invalid or not an admin token
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials:
        logger.warning("Access attempt without token")
        raise credentials_exception

    token_data = decode_token(credentials.credentials)
    if token_data is None:
        logger.warning("Invalid or expired token")
        raise credentials_exception

    if token_data.role != "admin" or token_data.username != settings.ADMIN_USERNAME:
        logger.warning(f"Token rejected for {token_data.username!r}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    return AdminContext(username=token_data.username, role=token_data.role)


# Type aliases for cleaner route signatures
CurrentAdmin = Annotated[AdminContext, Depends(get_current_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
