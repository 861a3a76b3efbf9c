"""
Pytest fixtures - test DB, client, users, items and faked side effects.
The app talks to an in-memory SQLite database through the same session the
tests use; Celery, Redis and the media host are replaced with recorders.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from rewear.core.enums import ItemStatus, Role  # noqa: E402
from rewear.core.security import create_access_token, hash_password  # noqa: E402
from rewear.db.base import Base  # noqa: E402
from rewear.db.models import Item, ItemImage, User  # noqa: E402
from rewear.db.session import get_db  # noqa: E402
from rewear.main import app  # noqa: E402
from rewear.media.media_host import UploadedImage, get_media_host, validate_image  # noqa: E402
from rewear.queue import tasks  # noqa: E402
from rewear.cache import redis_client  # noqa: E402
from rewear.services import swap_service, user_service  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "password123"
# Hash once; bcrypt is deliberately slow
PASSWORD_HASH = hash_password(PASSWORD)


class FakeMediaHost:
    """Validates like the real client, records uploads instead of calling out."""

    def __init__(self):
        self.uploaded: list[str] = []

    async def upload_images(self, files):
        result = []
        for f in files:
            content = await f.read()
            validate_image(f.content_type, len(content))
            n = len(self.uploaded) + 1
            self.uploaded.append(f.filename)
            result.append(UploadedImage(url=f"https://media.example.com/img{n}.png", public_id=f"rewear/items/img{n}"))
        return result


@pytest.fixture
def queued(monkeypatch) -> dict[str, list]:
    """Celery .delay calls by task name."""
    calls: dict[str, list] = {"index": [], "remove": [], "delete_images": []}
    monkeypatch.setattr(tasks.index_item_task, "delay", lambda doc: calls["index"].append(doc))
    monkeypatch.setattr(tasks.remove_item_task, "delay", lambda item_id: calls["remove"].append(item_id))
    monkeypatch.setattr(tasks.delete_images_task, "delay", lambda ids: calls["delete_images"].append(ids))
    return calls


@pytest.fixture
def fake_redis(monkeypatch) -> dict:
    """In-process stand-in for the Redis cache, pub/sub and counter helpers."""
    store: dict = {"cache": {}, "events": [], "counters": {}}

    async def cache_get(key):
        return store["cache"].get(key)

    async def cache_set(key, value, ttl_seconds=None):
        store["cache"][key] = value
        return True

    async def cache_delete(*keys):
        for key in keys:
            store["cache"].pop(key, None)
        return True

    async def publish_event(user_id, event, payload):
        store["events"].append((user_id, event, payload))
        return True

    async def incr_with_ttl(key, ttl_seconds):
        store["counters"][key] = store["counters"].get(key, 0) + 1
        return store["counters"][key]

    monkeypatch.setattr(user_service, "cache_get", cache_get)
    monkeypatch.setattr(user_service, "cache_set", cache_set)
    monkeypatch.setattr(swap_service, "cache_delete", cache_delete)
    monkeypatch.setattr(redis_client, "publish_event", publish_event)
    monkeypatch.setattr(redis_client, "incr_with_ttl", incr_with_ttl)
    return store


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with async_session() as s:
        yield s


@pytest.fixture
def media_host() -> FakeMediaHost:
    return FakeMediaHost()


@pytest_asyncio.fixture
async def client(session: AsyncSession, media_host, queued, fake_redis):
    async def override_get_db():
        try:
            yield session
        except Exception:
            redis_client.discard_pending_events(session.info)
            raise
        await redis_client.publish_pending_events(session.info)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_host] = lambda: media_host
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


# --- Data builders ---


async def make_user(
    session: AsyncSession,
    email: str,
    *,
    name: str | None = None,
    role: Role = Role.USER,
    points: int = 10,
) -> User:
    user = User(
        email=email,
        hashed_password=PASSWORD_HASH,
        name=name or email.split("@")[0].title(),
        role=role.value,
        points=points,
    )
    session.add(user)
    await session.flush()
    return user


async def make_item(
    session: AsyncSession,
    owner: User,
    *,
    title: str = "Denim jacket",
    points_required: int = 10,
    swap_type: str = "both",
    status: ItemStatus = ItemStatus.AVAILABLE,
    approved: bool = True,
    **fields,
) -> Item:
    item = Item(
        title=title,
        description=fields.pop("description", "A well loved garment in good shape."),
        category=fields.pop("category", "Outerwear"),
        size=fields.pop("size", "M"),
        condition=fields.pop("condition", "Good"),
        points_required=points_required,
        swap_type=swap_type,
        status=status.value,
        is_approved=approved,
        owner_id=owner.id,
        owner=owner,
        liked_by=[],
        images=[ItemImage(url="https://media.example.com/seed.png", public_id="rewear/items/seed", is_primary=True)],
        **fields,
    )
    session.add(item)
    await session.flush()
    return item


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest_asyncio.fixture
async def alice(session) -> User:
    return await make_user(session, "alice@example.com", name="Alice", points=50)


@pytest_asyncio.fixture
async def bob(session) -> User:
    return await make_user(session, "bob@example.com", name="Bob", points=10)


@pytest_asyncio.fixture
async def admin(session) -> User:
    return await make_user(session, "admin@example.com", name="Admin", role=Role.ADMIN)


@pytest.fixture
def alice_headers(alice) -> dict:
    return auth_headers_for(alice)


@pytest.fixture
def bob_headers(bob) -> dict:
    return auth_headers_for(bob)


@pytest.fixture
def admin_headers(admin) -> dict:
    return auth_headers_for(admin)
