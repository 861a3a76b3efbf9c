"""
User repository - user lookup, leaderboard and admin listing queries.
"""

from sqlalchemy import desc, func, or_, select

from rewear.db.models.user import User
from rewear.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """User-specific queries. Extends base CRUD with domain logic."""

    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        """Find user by email - used for authentication."""
        result = await self.session.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def leaderboard(self, limit: int = 10) -> list[User]:
        """Top users by eco impact, then by completed swaps."""
        result = await self.session.execute(
            select(User)
            .where(User.is_active.is_(True))
            .order_by(desc(User.eco_impact), desc(User.total_swaps), User.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def search(self, term: str | None, *, skip: int, limit: int) -> tuple[list[User], int]:
        """Admin listing; optional case-insensitive match on name or email."""
        stmt = select(User).order_by(desc(User.created_at), desc(User.id))
        if term:
            pattern = f"%{term}%"
            stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        return await self.paginate(stmt, skip=skip, limit=limit)

    async def recent(self, limit: int = 5) -> list[User]:
        result = await self.session.execute(
            select(User).order_by(desc(User.created_at), desc(User.id)).limit(limit)
        )
        return list(result.scalars().all())

    async def eco_impact_aggregates(self) -> tuple[float, float, float]:
        """(total, average, max) eco impact across all users."""
        row = (
            await self.session.execute(
                select(
                    func.coalesce(func.sum(User.eco_impact), 0.0),
                    func.coalesce(func.avg(User.eco_impact), 0.0),
                    func.coalesce(func.max(User.eco_impact), 0.0),
                )
            )
        ).one()
        return float(row[0]), float(row[1]), float(row[2])
