"""
Notification repository - per-user inbox queries and bulk read/clear.
"""

from sqlalchemy import delete, desc, select, update

from rewear.db.models.notification import Notification
from rewear.db.repositories.base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, session):
        super().__init__(session, Notification)

    async def for_user(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        type: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Notification], int]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        if type:
            stmt = stmt.where(Notification.type == type)
        stmt = stmt.order_by(desc(Notification.created_at), desc(Notification.id))
        return await self.paginate(stmt, skip=skip, limit=limit)

    async def unread_count(self, user_id: int) -> int:
        return await self.count(Notification.user_id == user_id, Notification.is_read.is_(False))

    async def mark_all_read(self, user_id: int) -> None:
        await self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )

    async def delete_for_user(self, user_id: int) -> None:
        await self.session.execute(delete(Notification).where(Notification.user_id == user_id))
