"""
Auth endpoints - registration, login, current user and public aggregates.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from rewear.core.dependencies import CurrentUser
from rewear.core.rate_limit import auth_rate_limit
from rewear.schemas.common import MessageResponse
from rewear.schemas.user import (
    LeaderboardEntry,
    LoginRequest,
    PlatformStats,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from rewear.services.factories import UserSvc
from rewear.services.user_service import user_response

router = APIRouter()


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
async def register(data: UserCreate, svc: UserSvc):
    """Create an account with the starting points balance and return a JWT."""
    return await svc.register(data)


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(auth_rate_limit)])
async def login(data: LoginRequest, svc: UserSvc):
    token = await svc.login(data.email, data.password)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


@router.get("/me", response_model=UserResponse)
async def me(user: CurrentUser):
    return user_response(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(user: CurrentUser, svc: UserSvc):
    """Tokens are stateless; logout only records activity. Clients drop the token."""
    await svc.touch(user)
    return MessageResponse(message="Logged out successfully")


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(svc: UserSvc, limit: int = Query(10, ge=1, le=50)):
    """Top users by eco impact, then completed swaps. Cached in Redis."""
    return await svc.leaderboard(limit)


@router.get("/stats", response_model=PlatformStats)
async def platform_stats(svc: UserSvc):
    return await svc.platform_stats()
