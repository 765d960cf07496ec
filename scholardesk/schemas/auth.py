"""
Authentication schemas.
"""

from pydantic import Field

from scholardesk.schemas.base import BaseSchema


class LoginRequest(BaseSchema):
    """Admin login request schema."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminInfo(BaseSchema):
    username: str
    role: str


class TokenResponse(BaseSchema):
    """Access token issued on login."""

    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: AdminInfo
