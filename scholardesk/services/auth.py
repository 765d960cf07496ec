"""
Authentication service.
Checks the back-office administrator credentials and issues tokens.
"""

import logging
import secrets
from fastapi import HTTPException, status

from scholardesk.core.config import settings
from scholardesk.core.security import create_access_token, verify_password
from scholardesk.schemas.auth import AdminInfo, LoginRequest, TokenResponse


logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class AuthService:
    """Service for authentication operations."""

    def _check_password(self, password: str) -> bool:
        if settings.ADMIN_PASSWORD_HASH:
            return verify_password(password, settings.ADMIN_PASSWORD_HASH)

        logger.warning("ADMIN_PASSWORD_HASH is not set, using the development default password")
        return secrets.compare_digest(password, settings.ADMIN_DEFAULT_PASSWORD)

    def login(self, data: LoginRequest) -> TokenResponse:
        """
        Authenticate the administrator and generate an access token.

        Args:
            data: Login credentials

        Returns:
            Token response with admin info

        Raises:
            HTTPException: If credentials are invalid
        """
        username_ok = secrets.compare_digest(data.username, settings.ADMIN_USERNAME)
        password_ok = self._check_password(data.password)

        if not (username_ok and password_ok):
            logger.warning(f"Failed login attempt for {data.username!r}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        logger.info(f"Admin {data.username} logged in")
        return TokenResponse(
            access_token=create_access_token(data.username, role=ADMIN_ROLE),
            user=AdminInfo(username=data.username, role=ADMIN_ROLE),
        )
