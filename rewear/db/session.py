"""
Async database session management.
Design: request-scoped sessions via dependency injection; commit on success,
rollback on error.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rewear.cache.redis_client import discard_pending_events, publish_pending_events
from rewear.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    """Pool sizing only applies to server databases (SQLite uses a static pool)."""
    if url.startswith("sqlite"):
        return {"echo": settings.debug}
    return {
        "echo": settings.debug,
        "pool_pre_ping": True,  # Verify connections before use
        "pool_size": 10,
        "max_overflow": 20,
    }


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# Session factory: one session per request
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session per request. Deferred events go out only after commit."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            discard_pending_events(session.info)
            raise
        else:
            await publish_pending_events(session.info)
        finally:
            await session.close()


# Type alias for FastAPI dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
