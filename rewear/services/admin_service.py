"""
Admin service - moderation queue, user management, platform dashboard and analytics.
"""

import logging
from datetime import datetime, timedelta

from rewear.core.enums import ItemStatus, Role, SwapStatus
from rewear.core.exceptions import InvalidOperationError, NotFoundError
from rewear.db.base import utcnow
from rewear.db.models.item import Item
from rewear.db.models.swap import Swap
from rewear.db.models.user import User
from rewear.db.repositories.item_repository import ItemRepository
from rewear.db.repositories.notification_repository import NotificationRepository
from rewear.db.repositories.swap_repository import SwapRepository
from rewear.db.repositories.user_repository import UserRepository
from rewear.queue.tasks import delete_images_task, remove_item_task
from rewear.schemas.admin import (
    AdminUserResponse,
    AnalyticsResponse,
    DashboardRecent,
    DashboardResponse,
    DashboardTotals,
    MonthlyCount,
)
from rewear.schemas.item import ItemSummary
from rewear.schemas.swap import SwapResponse
from rewear.services.item_service import enqueue, sync_search_index
from rewear.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

TREND_MONTHS = 6
ACTIVE_WINDOW = timedelta(days=30)


def last_months(now: datetime, count: int = TREND_MONTHS) -> list[tuple[int, int]]:
    """(year, month) pairs for the last `count` months, oldest first, current month included."""
    year, month = now.year, now.month
    months = []
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def monthly_counts(timestamps: list[datetime], months: list[tuple[int, int]]) -> list[MonthlyCount]:
    buckets = dict.fromkeys(months, 0)
    for ts in timestamps:
        key = (ts.year, ts.month)
        if key in buckets:
            buckets[key] += 1
    return [MonthlyCount(year=y, month=m, count=c) for (y, m), c in buckets.items()]


class AdminService:
    def __init__(
        self,
        user_repo: UserRepository,
        item_repo: ItemRepository,
        swap_repo: SwapRepository,
        notification_repo: NotificationRepository,
        notifications: NotificationService,
    ):
        self.user_repo = user_repo
        self.item_repo = item_repo
        self.swap_repo = swap_repo
        self.notification_repo = notification_repo
        self.notifications = notifications

    async def dashboard(self) -> DashboardResponse:
        total_eco, avg_eco, _ = await self.user_repo.eco_impact_aggregates()
        totals = DashboardTotals(
            total_users=await self.user_repo.count(),
            total_items=await self.item_repo.count(),
            pending_items=await self.item_repo.count(
                Item.status == ItemStatus.PENDING.value, Item.is_approved.is_(False)
            ),
            total_swaps=await self.swap_repo.count(),
            completed_swaps=await self.swap_repo.count(Swap.status == SwapStatus.COMPLETED.value),
            total_eco_impact=round(total_eco, 2),
            average_eco_impact=round(avg_eco, 2),
        )
        recent = DashboardRecent(
            users=[AdminUserResponse.model_validate(u) for u in await self.user_repo.recent()],
            items=[ItemSummary.model_validate(i) for i in await self.item_repo.recent()],
            swaps=[SwapResponse.model_validate(s) for s in await self.swap_repo.recent()],
        )
        return DashboardResponse(stats=totals, recent=recent)

    # --- Moderation ---

    async def _item(self, item_id: int) -> Item:
        item = await self.item_repo.get_by_id(item_id)
        if not item:
            raise NotFoundError("Item not found", error="Item not found")
        return item

    async def pending_items(self, *, skip: int, limit: int) -> tuple[list[Item], int]:
        return await self.item_repo.awaiting_approval(skip=skip, limit=limit)

    async def approve_item(self, item_id: int, admin: User) -> Item:
        item = await self._item(item_id)
        if item.is_listed:
            raise InvalidOperationError("Item is already approved", error="Already approved")
        if item.status == ItemStatus.SWAPPED.value:
            raise InvalidOperationError("Swapped items cannot be re-approved", error="Invalid status")
        item.is_approved = True
        item.status = ItemStatus.AVAILABLE.value
        item.approved_by_id = admin.id
        item.approved_at = utcnow()
        await self.notifications.item_approved(item)
        item = await self.item_repo.reload(item)
        sync_search_index(item)
        logger.info("item approved: item_id=%s admin_id=%s", item.id, admin.id)
        return item

    async def reject_item(self, item_id: int, admin: User, reason: str) -> Item:
        item = await self._item(item_id)
        if item.status == ItemStatus.SWAPPED.value:
            raise InvalidOperationError("Swapped items cannot be rejected", error="Invalid status")
        item.is_approved = False
        item.status = ItemStatus.REMOVED.value
        await self.notifications.item_rejected(item, reason)
        item = await self.item_repo.reload(item)
        sync_search_index(item)
        logger.info("item rejected: item_id=%s admin_id=%s reason=%r", item.id, admin.id, reason)
        return item

    async def set_item_status(self, item_id: int, status: ItemStatus) -> Item:
        item = await self._item(item_id)
        item.status = status.value
        item = await self.item_repo.reload(item)
        sync_search_index(item)
        logger.info("item status set: item_id=%s status=%s", item.id, item.status)
        return item

    # --- Users ---

    async def users(self, search: str | None, *, skip: int, limit: int) -> tuple[list[User], int]:
        return await self.user_repo.search(search, skip=skip, limit=limit)

    async def _user(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", error="User not found")
        return user

    async def set_role(self, user_id: int, admin: User, role: Role) -> User:
        if user_id == admin.id and role != Role.ADMIN:
            raise InvalidOperationError("You cannot change your own role", error="Invalid operation")
        user = await self._user(user_id)
        user.role = role.value
        logger.info("role changed: user_id=%s role=%s admin_id=%s", user.id, role.value, admin.id)
        return await self.user_repo.reload(user)

    async def delete_user(self, user_id: int, admin: User) -> None:
        """Remove a user together with their items, swaps, likes and notifications."""
        if user_id == admin.id:
            raise InvalidOperationError("You cannot delete your own account", error="Invalid operation")
        user = await self._user(user_id)
        item_ids = await self.item_repo.ids_for_owner(user.id)
        public_ids = await self.item_repo.public_ids_for_owner(user.id)

        await self.swap_repo.delete_touching(user.id, item_ids)
        for item_id in item_ids:
            item = await self.item_repo.get_by_id(item_id)
            if item is not None:
                await self.item_repo.delete(item)
        await self.item_repo.remove_likes_by_user(user.id)
        await self.notification_repo.delete_for_user(user.id)
        await self.user_repo.delete(user)

        for item_id in item_ids:
            enqueue(remove_item_task, item_id)
        if public_ids:
            enqueue(delete_images_task, public_ids)
        logger.info("user deleted: user_id=%s items=%d admin_id=%s", user_id, len(item_ids), admin.id)

    async def swaps(self, status: str | None, *, skip: int, limit: int) -> tuple[list[Swap], int]:
        return await self.swap_repo.list_all(status=status, skip=skip, limit=limit)

    # --- Analytics ---

    async def analytics(self) -> AnalyticsResponse:
        now = utcnow()
        total_eco, avg_eco, max_eco = await self.user_repo.eco_impact_aggregates()
        months = last_months(now)
        since = datetime(months[0][0], months[0][1], 1, tzinfo=now.tzinfo)
        return AnalyticsResponse(
            users={
                "total": await self.user_repo.count(),
                "active": await self.user_repo.count(User.last_active >= now - ACTIVE_WINDOW),
                "admins": await self.user_repo.count(User.role == Role.ADMIN.value),
            },
            items={
                "total": await self.item_repo.count(),
                **{s.value: await self.item_repo.count(Item.status == s.value) for s in ItemStatus},
            },
            swaps={
                "total": await self.swap_repo.count(),
                **{s.value: await self.swap_repo.count(Swap.status == s.value) for s in SwapStatus},
            },
            eco_impact={
                "total": round(total_eco, 2),
                "average": round(avg_eco, 2),
                "max": round(max_eco, 2),
            },
            trends={
                "users": monthly_counts(await self.user_repo.created_since(since), months),
                "items": monthly_counts(await self.item_repo.created_since(since), months),
                "swaps": monthly_counts(await self.swap_repo.created_since(since), months),
            },
        )
