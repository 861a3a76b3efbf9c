"""
Base repository - generic CRUD interface over an AsyncSession.
Keeps query construction in one place; services never build SQL.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rewear.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic async repository. Subclasses define model-specific methods."""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: int) -> ModelType | None:
        """Fetch single entity by primary key. Used for detail endpoints."""
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        return (await self.session.execute(stmt)).scalar_one()

    async def paginate(self, stmt: Select, *, skip: int, limit: int) -> tuple[list[ModelType], int]:
        """Run a filtered select as one page plus the total row count."""
        total = (
            await self.session.execute(select(func.count()).select_from(stmt.order_by(None).subquery()))
        ).scalar_one()
        result = await self.session.execute(stmt.offset(skip).limit(limit))
        return list(result.scalars().unique().all()), total

    async def created_since(self, since: datetime) -> list[datetime]:
        """Creation timestamps newer than `since` (analytics trends)."""
        result = await self.session.execute(select(self.model.created_at).where(self.model.created_at >= since))
        return list(result.scalars().all())

    async def add(self, entity: ModelType) -> ModelType:
        """Persist new entity. Caller commits session."""
        self.session.add(entity)
        await self.session.flush()  # Get ID without committing
        return entity

    async def reload(self, entity: ModelType) -> ModelType:
        """Flush pending changes and re-read the row with its eager relationships.
        Avoids lazy loads (MissingGreenlet) on freshly written objects."""
        await self.session.flush()
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == entity.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def delete(self, entity: ModelType) -> None:
        """Remove entity from DB."""
        await self.session.delete(entity)
        await self.session.flush()
