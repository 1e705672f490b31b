"""
Authentication router: login and current-user lookup.
"""

from fastapi import APIRouter

from medimaging.api.dependencies import CurrentClaimsDep, SettingsDep, UserServiceDep
from medimaging.models import LoginRequest, LoginResponse, UserRead

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest, service: UserServiceDep, settings: SettingsDep
) -> LoginResponse:
    """Exchange username and password for a bearer token."""
    return await service.login(
        credentials.username, credentials.password, expires_in=settings.token_expires_in
    )


@router.get("/me", response_model=UserRead)
async def get_me(claims: CurrentClaimsDep, service: UserServiceDep) -> UserRead:
    """Get the user the bearer token was issued to."""
    return await service.get_user(claims.id)
