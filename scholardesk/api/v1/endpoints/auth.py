"""
Authentication endpoints.
Admin login and token verification.
"""

from fastapi import APIRouter

from scholardesk.api.deps import CurrentAdmin
from scholardesk.schemas.auth import AdminInfo, LoginRequest, TokenResponse
from scholardesk.services.auth import AuthService


router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Admin login",
    description="Log in with the administrator username and password",
)
async def login(data: LoginRequest) -> TokenResponse:
    """Login and obtain a JWT access token."""
    return AuthService().login(data)


@router.get(
    "/verify",
    summary="Verify token",
    description="Check that the bearer token is still valid",
)
async def verify(admin: CurrentAdmin) -> dict:
    """Return the admin behind the token."""
    return {
        "valid": True,
        "user": AdminInfo(username=admin.username, role=admin.role).model_dump(),
    }
