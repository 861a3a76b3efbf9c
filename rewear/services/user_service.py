"""
User service - registration, login, profile, personal stats and public
aggregates (leaderboard, platform stats) cached in Redis.
"""

import logging

from rewear.cache.redis_client import cache_get, cache_set
from rewear.config import get_settings
from rewear.core.enums import Badge, ItemStatus, SwapStatus
from rewear.core.exceptions import ConflictError, NotFoundError
from rewear.core.security import create_access_token, hash_password, verify_password
from rewear.db.base import utcnow
from rewear.db.models.item import Item
from rewear.db.models.swap import Swap
from rewear.db.models.user import User
from rewear.db.repositories.item_repository import ItemRepository
from rewear.db.repositories.swap_repository import SwapRepository
from rewear.db.repositories.user_repository import UserRepository
from rewear.schemas.user import (
    DashboardStats,
    LeaderboardEntry,
    PlatformStats,
    ProfileUpdate,
    PublicUserResponse,
    TokenResponse,
    UserCreate,
    UserResponse,
    UserStats,
)
from rewear.services.notification_service import NotificationService

logger = logging.getLogger(__name__)
settings = get_settings()

LEADERBOARD_CACHE_KEY = "leaderboard:"
PLATFORM_STATS_CACHE_KEY = "stats:platform"

# (badge, predicate) checked after every stats change
BADGE_RULES = (
    (Badge.FIRST_SWAP, lambda u: u.total_swaps >= 1),
    (Badge.FREQUENT_SWAPPER, lambda u: u.total_swaps >= 10),
    (Badge.COMMUNITY_LEADER, lambda u: u.total_swaps >= 25),
    (Badge.ECO_HERO, lambda u: u.eco_impact >= 50),
    (Badge.TOP_CONTRIBUTOR, lambda u: u.items_listed >= 20),
)


async def award_badges(user: User, notifications: NotificationService) -> list[str]:
    """Grant every badge the user now qualifies for; notify once per new badge."""
    earned = []
    for badge, qualifies in BADGE_RULES:
        if qualifies(user) and user.add_badge(badge.value):
            earned.append(badge.value)
            await notifications.badge_earned(user.id, badge.value)
    if earned:
        logger.info("badges earned: user_id=%s badges=%s", user.id, earned)
    return earned


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        avatar=user.avatar,
        points=user.points,
        role=user.role,
        is_verified=user.is_verified,
        badges=user.badges,
        stats=UserStats.model_validate(user),
        preferences=user.preferences,
        city=user.city,
        country=user.country,
        last_active=user.last_active,
        created_at=user.created_at,
    )


def public_user_response(user: User) -> PublicUserResponse:
    return PublicUserResponse(
        id=user.id,
        name=user.name,
        avatar=user.avatar,
        stats=UserStats.model_validate(user),
        badges=user.badges,
        member_since=user.created_at,
    )


class UserService:
    """Account and profile use cases."""

    def __init__(
        self,
        user_repo: UserRepository,
        item_repo: ItemRepository,
        swap_repo: SwapRepository,
        notifications: NotificationService,
    ):
        self.user_repo = user_repo
        self.item_repo = item_repo
        self.swap_repo = swap_repo
        self.notifications = notifications

    async def register(self, data: UserCreate) -> TokenResponse:
        if await self.user_repo.get_by_email(data.email):
            raise ConflictError("User with this email already exists", error="User already exists")
        user = await self.user_repo.add(
            User(
                email=data.email.lower(),
                hashed_password=hash_password(data.password),
                name=data.name,
                avatar=str(data.avatar) if data.avatar else None,
                points=settings.starting_points,
            )
        )
        await self.notifications.welcome(user)
        logger.info("user registered: user_id=%s", user.id)
        return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)

    async def login(self, email: str, password: str) -> TokenResponse | None:
        """Returns None on bad credentials; the endpoint answers 401."""
        user = await self.user_repo.get_by_email(email)
        if not user or not user.is_active or not verify_password(password, user.hashed_password):
            return None
        user.last_active = utcnow()
        return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)

    async def touch(self, user: User) -> None:
        user.last_active = utcnow()
        await self.user_repo.session.flush()

    async def update_profile(self, user: User, data: ProfileUpdate) -> UserResponse:
        if data.name is not None:
            user.name = data.name.strip()
        if data.avatar is not None:
            user.avatar = str(data.avatar)
        if data.city is not None:
            user.city = data.city
        if data.country is not None:
            user.country = data.country
        if data.preferences is not None:
            user.preferences = data.preferences.model_dump(mode="json")
        user = await self.user_repo.reload(user)
        return user_response(user)

    async def dashboard_stats(self, user: User) -> DashboardStats:
        return DashboardStats(
            **UserStats.model_validate(user).model_dump(),
            total_items=await self.item_repo.count(Item.owner_id == user.id),
            available_items=await self.item_repo.count(
                Item.owner_id == user.id,
                Item.status == ItemStatus.AVAILABLE.value,
            ),
            pending_items=await self.item_repo.count(
                Item.owner_id == user.id,
                Item.status == ItemStatus.PENDING.value,
            ),
            swaps_involved=await self.swap_repo.count_for_user(user.id),
            pending_swaps=await self.swap_repo.count_for_user(user.id, SwapStatus.PENDING.value),
            points=user.points,
            badges=user.badges,
        )

    async def add_points(self, user: User, amount: int) -> int:
        user.points += amount
        await self.user_repo.session.flush()
        await self.notifications.points_earned(user.id, amount, "as a bonus")
        logger.info("points added: user_id=%s amount=%s", user.id, amount)
        return user.points

    async def public_profile(self, user_id: int) -> tuple[PublicUserResponse, list]:
        """Public profile plus up to six of the user's listed items."""
        user = await self.user_repo.get_by_id(user_id)
        if not user or not user.is_active:
            raise NotFoundError("User not found", error="User not found")
        items, _ = await self.item_repo.by_owner(user.id, listed_only=True, skip=0, limit=6)
        return public_user_response(user), items

    async def get_active(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user or not user.is_active:
            raise NotFoundError("User not found", error="User not found")
        return user

    async def leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        key = f"{LEADERBOARD_CACHE_KEY}{limit}"
        cached = await cache_get(key)
        if cached is not None:
            return [LeaderboardEntry(**row) for row in cached]
        entries = [LeaderboardEntry.model_validate(u) for u in await self.user_repo.leaderboard(limit)]
        await cache_set(key, [e.model_dump(mode="json") for e in entries])
        return entries

    async def platform_stats(self) -> PlatformStats:
        cached = await cache_get(PLATFORM_STATS_CACHE_KEY)
        if cached is not None:
            return PlatformStats(**cached)
        total_eco, avg_eco, _ = await self.user_repo.eco_impact_aggregates()
        stats = PlatformStats(
            total_users=await self.user_repo.count(User.is_active.is_(True)),
            total_items=await self.item_repo.count(
                Item.status == ItemStatus.AVAILABLE.value,
                Item.is_approved.is_(True),
            ),
            total_swaps=await self.swap_repo.count(
                Swap.status == SwapStatus.COMPLETED.value
            ),
            total_eco_impact=round(total_eco, 2),
            average_eco_impact=round(avg_eco, 2),
        )
        await cache_set(PLATFORM_STATS_CACHE_KEY, stats.model_dump(mode="json"))
        return stats
