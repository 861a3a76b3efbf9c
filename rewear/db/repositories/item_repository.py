"""
Item repository - listing search, owner listings and moderation queues.
Owner, images and likes are eager-loaded by the model (selectin) to avoid N+1.
"""

from dataclasses import dataclass

from sqlalchemy import String, cast, delete, desc, func, or_, select

from rewear.core.enums import ItemStatus
from rewear.db.models.item import Item, ItemImage, item_likes
from rewear.db.repositories.base_repository import BaseRepository


@dataclass
class ItemFilters:
    category: str | None = None
    size: str | None = None
    condition: str | None = None
    min_points: int | None = None
    max_points: int | None = None
    search: str | None = None
    tag: str | None = None


def _listed():
    return (Item.status == ItemStatus.AVAILABLE.value, Item.is_approved.is_(True))


class ItemRepository(BaseRepository[Item]):
    """Item-specific queries."""

    def __init__(self, session):
        super().__init__(session, Item)

    async def search_listed(self, filters: ItemFilters, *, skip: int, limit: int) -> tuple[list[Item], int]:
        """Approved, available items matching the browse filters, newest first."""
        stmt = select(Item).where(*_listed())
        if filters.category:
            stmt = stmt.where(Item.category == filters.category)
        if filters.size:
            stmt = stmt.where(Item.size == filters.size)
        if filters.condition:
            stmt = stmt.where(Item.condition == filters.condition)
        if filters.min_points is not None:
            stmt = stmt.where(Item.points_required >= filters.min_points)
        if filters.max_points is not None:
            stmt = stmt.where(Item.points_required <= filters.max_points)
        if filters.search:
            pattern = f"%{filters.search}%"
            stmt = stmt.where(
                or_(Item.title.ilike(pattern), Item.description.ilike(pattern), Item.brand.ilike(pattern))
            )
        if filters.tag:
            # Tags are a JSON array; match the quoted element in its text form
            stmt = stmt.where(cast(Item.tags, String).ilike(f'%"{filters.tag}"%'))
        stmt = stmt.order_by(desc(Item.created_at), desc(Item.id))
        return await self.paginate(stmt, skip=skip, limit=limit)

    async def featured(self, limit: int = 8) -> list[Item]:
        """Most viewed, then most liked, then newest listed items."""
        likes_count = (
            select(func.count()).where(item_likes.c.item_id == Item.id).correlate(Item).scalar_subquery()
        )
        result = await self.session.execute(
            select(Item)
            .where(*_listed())
            .order_by(desc(Item.views), desc(likes_count), desc(Item.created_at))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def by_owner(
        self,
        owner_id: int,
        *,
        status: str | None = None,
        listed_only: bool = False,
        skip: int = 0,
        limit: int = 12,
    ) -> tuple[list[Item], int]:
        stmt = select(Item).where(Item.owner_id == owner_id)
        if listed_only:
            stmt = stmt.where(*_listed())
        if status:
            stmt = stmt.where(Item.status == status)
        stmt = stmt.order_by(desc(Item.created_at), desc(Item.id))
        return await self.paginate(stmt, skip=skip, limit=limit)

    async def awaiting_approval(self, *, skip: int, limit: int) -> tuple[list[Item], int]:
        stmt = (
            select(Item)
            .where(Item.status == ItemStatus.PENDING.value, Item.is_approved.is_(False))
            .order_by(desc(Item.created_at), desc(Item.id))
        )
        return await self.paginate(stmt, skip=skip, limit=limit)

    async def all_items(self) -> list[Item]:
        result = await self.session.execute(select(Item).order_by(desc(Item.created_at), desc(Item.id)))
        return list(result.scalars().all())

    async def recent(self, limit: int = 5) -> list[Item]:
        result = await self.session.execute(
            select(Item).order_by(desc(Item.created_at), desc(Item.id)).limit(limit)
        )
        return list(result.scalars().all())

    async def ids_for_owner(self, owner_id: int) -> list[int]:
        result = await self.session.execute(select(Item.id).where(Item.owner_id == owner_id))
        return list(result.scalars().all())

    async def public_ids_for_owner(self, owner_id: int) -> list[str]:
        """Media-host ids of every image owned by the user (cleanup before cascade delete)."""
        result = await self.session.execute(
            select(ItemImage.public_id).join(Item, Item.id == ItemImage.item_id).where(Item.owner_id == owner_id)
        )
        return list(result.scalars().all())

    async def remove_likes_by_user(self, user_id: int) -> None:
        await self.session.execute(delete(item_likes).where(item_likes.c.user_id == user_id))
