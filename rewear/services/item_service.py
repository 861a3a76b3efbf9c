"""
Item service - the listing lifecycle from upload to deletion, plus likes.
Orchestrates repositories, the media host and the search queue; endpoints stay thin.
"""

import logging

from fastapi import UploadFile

from rewear.config import get_settings
from rewear.core.enums import ItemStatus
from rewear.core.exceptions import InvalidOperationError, NotFoundError, PermissionDeniedError
from rewear.db.models.item import Item, ItemImage
from rewear.db.models.user import User
from rewear.db.repositories.item_repository import ItemFilters, ItemRepository
from rewear.db.repositories.swap_repository import SwapRepository
from rewear.media.media_host import MediaHost
from rewear.queue.tasks import delete_images_task, index_item_task, remove_item_task
from rewear.schemas.item import ItemCreate, ItemImageResponse, ItemResponse, ItemUpdate, LikeResponse
from rewear.schemas.user import UserSummary
from rewear.services.notification_service import NotificationService
from rewear.services.user_service import award_badges

logger = logging.getLogger(__name__)
settings = get_settings()


def item_to_doc(item: Item) -> dict:
    """Convert ORM model to the Elasticsearch document."""
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "brand": item.brand,
        "tags": item.tags,
        "category": item.category,
        "size": item.size,
        "condition": item.condition,
        "points_required": item.points_required,
        "owner_id": item.owner_id,
        "primary_image": item.primary_image,
        "created_at": item.created_at.isoformat() if item.created_at else None,
    }


def item_response(item: Item) -> ItemResponse:
    return ItemResponse(
        id=item.id,
        title=item.title,
        description=item.description,
        category=item.category,
        size=item.size,
        condition=item.condition,
        points_required=item.points_required,
        brand=item.brand,
        color=item.color,
        material=item.material,
        tags=item.tags,
        swap_type=item.swap_type,
        status=item.status,
        is_approved=item.is_approved,
        approved_at=item.approved_at,
        views=item.views,
        likes_count=len(item.liked_by),
        liked_by=[u.id for u in item.liked_by],
        images=[ItemImageResponse.model_validate(img) for img in item.images],
        primary_image=item.primary_image,
        owner_id=item.owner_id,
        owner=UserSummary.model_validate(item.owner),
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def enqueue(task, *args) -> None:
    """Send a Celery task; a broker outage must not fail the request."""
    try:
        task.delay(*args)
    except Exception as e:
        logger.warning("task not queued: task=%s error=%s", task.name, e)


def sync_search_index(item: Item) -> None:
    """Queue (re)indexing for listed items and removal for everything else."""
    if item.is_listed:
        enqueue(index_item_task, item_to_doc(item))
    else:
        enqueue(remove_item_task, item.id)


class ItemService:
    """Handles item use cases: listing, media, moderation state, search sync."""

    def __init__(
        self,
        item_repo: ItemRepository,
        swap_repo: SwapRepository,
        notifications: NotificationService,
    ):
        self.item_repo = item_repo
        self.swap_repo = swap_repo
        self.notifications = notifications

    async def get_or_404(self, item_id: int) -> Item:
        item = await self.item_repo.get_by_id(item_id)
        if not item:
            raise NotFoundError("Item not found", error="Item not found")
        return item

    async def get_owned(self, item_id: int, user: User) -> Item:
        item = await self.get_or_404(item_id)
        if item.owner_id != user.id:
            raise PermissionDeniedError("You can only modify your own items")
        return item

    async def browse(self, filters: ItemFilters, *, skip: int, limit: int) -> tuple[list[Item], int]:
        return await self.item_repo.search_listed(filters, skip=skip, limit=limit)

    async def featured(self, limit: int) -> list[Item]:
        return await self.item_repo.featured(limit)

    async def all_items(self) -> list[Item]:
        return await self.item_repo.all_items()

    async def view(self, item_id: int, viewer: User | None) -> Item:
        """Item detail. Unlisted items are visible to their owner and admins only."""
        item = await self.get_or_404(item_id)
        privileged = viewer is not None and (viewer.id == item.owner_id or viewer.is_admin)
        if item.status == ItemStatus.REMOVED.value and not privileged:
            raise NotFoundError("Item not found", error="Item not found")
        item.views += 1
        return await self.item_repo.reload(item)

    async def create(
        self, owner: User, data: ItemCreate, images: list[UploadFile], media: MediaHost
    ) -> Item:
        if not images:
            raise InvalidOperationError("At least one image is required", error="Images required")
        if len(images) > settings.media_max_files:
            raise InvalidOperationError(
                f"Maximum {settings.media_max_files} images allowed", error="Too many images"
            )
        primary_index = data.primary_image_index if data.primary_image_index < len(images) else 0

        uploaded = await media.upload_images(images)
        item = Item(
            title=data.title,
            description=data.description,
            category=data.category.value,
            size=data.size.value,
            condition=data.condition.value,
            brand=data.brand,
            color=data.color,
            material=data.material,
            tags=data.tags,
            points_required=data.points_required,
            swap_type=data.swap_type.value,
            status=ItemStatus.PENDING.value,
            is_approved=False,
            owner_id=owner.id,
            images=[
                ItemImage(url=img.url, public_id=img.public_id, is_primary=i == primary_index, position=i)
                for i, img in enumerate(uploaded)
            ],
        )
        item = await self.item_repo.add(item)
        owner.items_listed += 1
        await award_badges(owner, self.notifications)
        logger.info("item created: item_id=%s owner_id=%s images=%d", item.id, owner.id, len(uploaded))
        return await self.item_repo.reload(item)

    async def update(self, item_id: int, user: User, data: ItemUpdate) -> Item:
        """Owner edit. Any edit sends the item back to moderation."""
        item = await self.get_owned(item_id, user)
        if item.status == ItemStatus.SWAPPED.value:
            raise InvalidOperationError("Cannot edit an item that has been swapped")
        changes = data.model_dump(exclude_unset=True, mode="json")
        for field, value in changes.items():
            if value is not None:
                setattr(item, field, value)
        item.is_approved = False
        item.status = ItemStatus.PENDING.value
        item.approved_at = None
        item.approved_by_id = None
        item = await self.item_repo.reload(item)
        sync_search_index(item)
        logger.info("item updated: item_id=%s fields=%s", item.id, sorted(changes))
        return item

    async def delete(self, item_id: int, user: User) -> None:
        item = await self.get_owned(item_id, user)
        if item.status == ItemStatus.SWAPPED.value:
            raise InvalidOperationError("Cannot delete an item that has been swapped")
        public_ids = [img.public_id for img in item.images]
        await self.swap_repo.delete_for_items([item.id])
        await self.item_repo.delete(item)
        user.items_listed = max(user.items_listed - 1, 0)
        enqueue(remove_item_task, item_id)
        if public_ids:
            enqueue(delete_images_task, public_ids)
        logger.info("item deleted: item_id=%s owner_id=%s", item_id, user.id)

    async def toggle_like(self, item_id: int, user: User) -> LikeResponse:
        item = await self.get_or_404(item_id)
        if user in item.liked_by:
            item.liked_by.remove(user)
            liked = False
        else:
            item.liked_by.append(user)
            liked = True
        await self.item_repo.session.flush()
        return LikeResponse(liked=liked, likes_count=len(item.liked_by))

    async def listed_by_user(self, user_id: int, *, skip: int, limit: int) -> tuple[list[Item], int]:
        return await self.item_repo.by_owner(user_id, listed_only=True, skip=skip, limit=limit)

    async def owned_by(self, user: User, *, status: str | None, skip: int, limit: int) -> tuple[list[Item], int]:
        return await self.item_repo.by_owner(user.id, status=status, skip=skip, limit=limit)
