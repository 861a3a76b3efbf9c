"""
FastAPI dependencies - current user resolution, admin guard, pagination.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rewear.config import get_settings
from rewear.core.exceptions import PermissionDeniedError
from rewear.core.security import decode_access_token
from rewear.db.base import utcnow
from rewear.db.models.user import User
from rewear.db.repositories.user_repository import UserRepository
from rewear.db.session import DbSession

settings = get_settings()
security = HTTPBearer(auto_error=False)


async def get_current_user(
    session: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Resolve the bearer JWT to an active user. Raises 401 if missing or invalid."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await UserRepository(session).get_by_id(int(payload["sub"]))
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")
    user.last_active = utcnow()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> User:
    if not user.is_admin:
        raise PermissionDeniedError(
            "You do not have permission to access this resource", error="Admin access required"
        )
    return user


AdminUser = Annotated[User, Depends(require_admin)]


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def page_params(default_limit: int):
    """Build a page/limit query dependency with an endpoint-specific default size."""

    def dependency(
        page: int = Query(1, ge=1),
        limit: int = Query(default_limit, ge=1, le=settings.max_page_size),
    ) -> PageParams:
        return PageParams(page=page, limit=limit)

    return dependency


ItemPage = Annotated[PageParams, Depends(page_params(settings.default_page_size))]
SwapPage = Annotated[PageParams, Depends(page_params(10))]
NotificationPage = Annotated[PageParams, Depends(page_params(20))]
AdminPage = Annotated[PageParams, Depends(page_params(10))]


async def get_optional_user(
    session: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User | None:
    """Like get_current_user, but anonymous or invalid tokens resolve to None."""
    if not credentials:
        return None
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        return None
    user = await UserRepository(session).get_by_id(int(payload["sub"]))
    return user if user and user.is_active else None


OptionalUser = Annotated[User | None, Depends(get_optional_user)]
