"""
Swap repository - participant listings, duplicate checks and cascade cleanup.
"""

from sqlalchemy import delete, desc, or_, select

from rewear.core.enums import SwapStatus
from rewear.db.models.swap import Swap, SwapMessage, SwapRating
from rewear.db.repositories.base_repository import BaseRepository


def _involving(user_id: int):
    return or_(Swap.initiator_id == user_id, Swap.recipient_id == user_id)


class SwapRepository(BaseRepository[Swap]):
    """Swap-specific queries. Items, users, chat and ratings load eagerly (selectin)."""

    def __init__(self, session):
        super().__init__(session, Swap)

    async def for_user(
        self, user_id: int, *, status: str | None = None, skip: int = 0, limit: int = 10
    ) -> tuple[list[Swap], int]:
        """Swaps the user initiated or received, newest first."""
        stmt = select(Swap).where(_involving(user_id))
        if status:
            stmt = stmt.where(Swap.status == status)
        stmt = stmt.order_by(desc(Swap.created_at), desc(Swap.id))
        return await self.paginate(stmt, skip=skip, limit=limit)

    async def pending_for_recipient(self, user_id: int) -> list[Swap]:
        result = await self.session.execute(
            select(Swap)
            .where(Swap.recipient_id == user_id, Swap.status == SwapStatus.PENDING.value)
            .order_by(desc(Swap.created_at), desc(Swap.id))
        )
        return list(result.scalars().all())

    async def find_pending(self, initiator_id: int, requested_item_id: int) -> Swap | None:
        result = await self.session.execute(
            select(Swap).where(
                Swap.initiator_id == initiator_id,
                Swap.requested_item_id == requested_item_id,
                Swap.status == SwapStatus.PENDING.value,
            )
        )
        return result.scalars().first()

    async def pending_touching_items(self, item_ids: list[int], *, exclude_id: int) -> list[Swap]:
        """Other pending swaps that request or offer any of the given items."""
        result = await self.session.execute(
            select(Swap).where(
                Swap.id != exclude_id,
                Swap.status == SwapStatus.PENDING.value,
                or_(Swap.requested_item_id.in_(item_ids), Swap.offered_item_id.in_(item_ids)),
            )
        )
        return list(result.scalars().all())

    async def list_all(self, *, status: str | None = None, skip: int = 0, limit: int = 10) -> tuple[list[Swap], int]:
        stmt = select(Swap)
        if status:
            stmt = stmt.where(Swap.status == status)
        stmt = stmt.order_by(desc(Swap.created_at), desc(Swap.id))
        return await self.paginate(stmt, skip=skip, limit=limit)

    async def recent(self, limit: int = 5) -> list[Swap]:
        result = await self.session.execute(
            select(Swap).order_by(desc(Swap.created_at), desc(Swap.id)).limit(limit)
        )
        return list(result.scalars().all())

    async def count_for_user(self, user_id: int, status: str | None = None) -> int:
        criteria = [_involving(user_id)]
        if status:
            criteria.append(Swap.status == status)
        return await self.count(*criteria)

    async def delete_touching(self, user_id: int, item_ids: list[int]) -> None:
        """Bulk-delete every swap involving the user or any of their items."""
        clauses = [_involving(user_id)]
        if item_ids:
            clauses += [Swap.requested_item_id.in_(item_ids), Swap.offered_item_id.in_(item_ids)]
        await self._delete_where(or_(*clauses))

    async def delete_for_items(self, item_ids: list[int]) -> None:
        """Bulk-delete swaps that requested or offered any of the items."""
        await self._delete_where(or_(Swap.requested_item_id.in_(item_ids), Swap.offered_item_id.in_(item_ids)))

    async def _delete_where(self, criterion) -> None:
        swap_ids = list((await self.session.execute(select(Swap.id).where(criterion))).scalars().all())
        if not swap_ids:
            return
        await self.session.execute(delete(SwapMessage).where(SwapMessage.swap_id.in_(swap_ids)))
        await self.session.execute(delete(SwapRating).where(SwapRating.swap_id.in_(swap_ids)))
        await self.session.execute(delete(Swap).where(Swap.id.in_(swap_ids)))
