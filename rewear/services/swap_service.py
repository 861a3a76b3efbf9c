"""
Swap service - the swap state machine and the points ledger.

    pending --accept--> accepted --complete--> completed
       |--reject--> rejected         |
       '--cancel--> cancelled <-cancel'

Acceptance re-validates the offer before anything moves; competing pending
requests for the same items are auto-rejected.
All writes share the request session and commit together.
"""

import logging

from rewear.cache.redis_client import cache_delete
from rewear.config import get_settings
from rewear.core.enums import ItemStatus, ItemSwapType, SwapStatus, SwapType
from rewear.core.exceptions import InvalidOperationError, NotFoundError, PermissionDeniedError
from rewear.db.base import utcnow
from rewear.db.models.item import Item
from rewear.db.models.swap import Swap, SwapMessage, SwapRating
from rewear.db.models.user import User
from rewear.db.repositories.item_repository import ItemRepository
from rewear.db.repositories.swap_repository import SwapRepository
from rewear.schemas.swap import SwapCreate
from rewear.services.item_service import sync_search_index
from rewear.services.notification_service import NotificationService
from rewear.services.user_service import LEADERBOARD_CACHE_KEY, PLATFORM_STATS_CACHE_KEY, award_badges

logger = logging.getLogger(__name__)
settings = get_settings()

OPEN_STATUSES = (SwapStatus.PENDING.value, SwapStatus.ACCEPTED.value)


def _not_available(what: str = "Item") -> InvalidOperationError:
    return InvalidOperationError(f"{what} is not available for swap", error="Item not available")


class SwapService:
    def __init__(
        self,
        swap_repo: SwapRepository,
        item_repo: ItemRepository,
        notifications: NotificationService,
    ):
        self.swap_repo = swap_repo
        self.item_repo = item_repo
        self.notifications = notifications

    # --- Lookups ---

    async def get_or_404(self, swap_id: int) -> Swap:
        swap = await self.swap_repo.get_by_id(swap_id)
        if not swap:
            raise NotFoundError("Swap not found", error="Swap not found")
        return swap

    async def get_for_participant(self, swap_id: int, user: User) -> Swap:
        swap = await self.get_or_404(swap_id)
        if not swap.is_participant(user.id):
            raise PermissionDeniedError("You are not a participant in this swap")
        return swap

    async def view(self, swap_id: int, user: User) -> Swap:
        swap = await self.get_or_404(swap_id)
        if not swap.is_participant(user.id) and not user.is_admin:
            raise PermissionDeniedError("You are not a participant in this swap")
        return swap

    async def list_for_user(self, user: User, *, status: str | None, skip: int, limit: int):
        return await self.swap_repo.for_user(user.id, status=status, skip=skip, limit=limit)

    async def pending_for(self, user: User) -> list[Swap]:
        return await self.swap_repo.pending_for_recipient(user.id)

    # --- Offer validation ---

    def _check_offer(self, initiator: User, requested: Item, offered: Item | None, swap_type: str, points: int | None):
        """Raise if the offer is not (or no longer) legal. Shared by create and accept."""
        if not requested.is_listed:
            raise _not_available()
        if requested.owner_id == initiator.id:
            raise InvalidOperationError("You cannot swap for your own item", error="Invalid swap")
        if requested.swap_type not in (ItemSwapType.BOTH.value, swap_type):
            raise InvalidOperationError(
                f"This item only accepts {requested.swap_type} swaps", error="Invalid swap type"
            )
        if swap_type == SwapType.DIRECT.value:
            if offered is None:
                raise InvalidOperationError("An offered item is required for direct swaps", error="Invalid swap")
            if offered.owner_id != initiator.id:
                raise PermissionDeniedError("You can only offer your own items")
            if not offered.is_listed:
                raise _not_available("Offered item")
        else:
            if not points or points <= 0:
                raise InvalidOperationError("Points offered must be greater than zero", error="Invalid points")
            if points < requested.points_required:
                raise InvalidOperationError(
                    f"This item requires at least {requested.points_required} points", error="Insufficient offer"
                )
            if initiator.points < points:
                raise InvalidOperationError("You do not have enough points", error="Insufficient points")

    # --- Transitions ---

    async def create(self, initiator: User, data: SwapCreate) -> Swap:
        requested = await self.item_repo.get_by_id(data.requested_item_id)
        if not requested:
            raise NotFoundError("Requested item not found", error="Item not found")
        offered = None
        if data.swap_type == SwapType.DIRECT and data.offered_item_id is not None:
            offered = await self.item_repo.get_by_id(data.offered_item_id)
            if not offered:
                raise NotFoundError("Offered item not found", error="Item not found")
        points = data.points_offered if data.swap_type == SwapType.POINTS else None
        self._check_offer(initiator, requested, offered, data.swap_type.value, points)

        if await self.swap_repo.find_pending(initiator.id, requested.id):
            raise InvalidOperationError(
                "You already have a pending swap request for this item", error="Duplicate request"
            )

        swap = await self.swap_repo.add(
            Swap(
                initiator_id=initiator.id,
                recipient_id=requested.owner_id,
                requested_item_id=requested.id,
                offered_item_id=offered.id if offered else None,
                points_offered=points,
                swap_type=data.swap_type.value,
                status=SwapStatus.PENDING.value,
                message=data.message,
            )
        )
        await self.notifications.swap_request(swap, initiator, requested)
        logger.info(
            "swap created: swap_id=%s type=%s initiator_id=%s item_id=%s",
            swap.id, swap.swap_type, initiator.id, requested.id,
        )
        return await self.swap_repo.reload(swap)

    async def accept(self, swap_id: int, user: User, response_message: str | None = None) -> Swap:
        swap = await self.get_or_404(swap_id)
        if swap.recipient_id != user.id:
            raise PermissionDeniedError("Only the item owner can accept this swap")
        if swap.status != SwapStatus.PENDING.value:
            raise InvalidOperationError(f"Cannot accept a swap that is {swap.status}", error="Invalid status")

        initiator, requested, offered = swap.initiator, swap.requested_item, swap.offered_item
        if requested.owner_id != user.id:
            raise _not_available()
        self._check_offer(initiator, requested, offered, swap.swap_type, swap.points_offered)

        swap.status = SwapStatus.ACCEPTED.value
        swap.response_message = response_message
        requested.status = ItemStatus.SWAPPED.value
        if offered is not None:
            offered.status = ItemStatus.SWAPPED.value
        if swap.swap_type == SwapType.POINTS.value:
            initiator.points -= swap.points_offered
            user.points += swap.points_offered

        touched = [i.id for i in (requested, offered) if i is not None]
        for other in await self.swap_repo.pending_touching_items(touched, exclude_id=swap.id):
            other.status = SwapStatus.REJECTED.value
            other.response_message = "Item is no longer available"
            await self.notifications.swap_rejected(other)
            logger.info("swap auto-rejected: swap_id=%s accepted_swap_id=%s", other.id, swap.id)

        await self.notifications.swap_accepted(swap, user)
        if swap.swap_type == SwapType.POINTS.value:
            await self.notifications.points_earned(
                user.id, swap.points_offered, f'for "{requested.title}"'
            )
        for item in (requested, offered):
            if item is not None:
                sync_search_index(item)
        logger.info("swap accepted: swap_id=%s", swap.id)
        return await self.swap_repo.reload(swap)

    async def reject(self, swap_id: int, user: User, response_message: str | None = None) -> Swap:
        swap = await self.get_or_404(swap_id)
        if swap.recipient_id != user.id:
            raise PermissionDeniedError("Only the item owner can reject this swap")
        if swap.status != SwapStatus.PENDING.value:
            raise InvalidOperationError(f"Cannot reject a swap that is {swap.status}", error="Invalid status")
        swap.status = SwapStatus.REJECTED.value
        swap.response_message = response_message
        await self.notifications.swap_rejected(swap, user)
        logger.info("swap rejected: swap_id=%s", swap.id)
        return await self.swap_repo.reload(swap)

    async def complete(self, swap_id: int, user: User) -> Swap:
        swap = await self.get_for_participant(swap_id, user)
        if swap.status != SwapStatus.ACCEPTED.value:
            raise InvalidOperationError("Only accepted swaps can be completed", error="Invalid status")

        credit = settings.eco_impact_per_swap
        swap.status = SwapStatus.COMPLETED.value
        swap.completed_at = utcnow()
        swap.eco_impact = credit * 2
        for participant in (swap.initiator, swap.recipient):
            participant.total_swaps += 1
            participant.eco_impact += credit
        swap.initiator.items_received += 1
        if swap.swap_type == SwapType.DIRECT.value:
            swap.recipient.items_received += 1

        for participant in (swap.initiator, swap.recipient):
            await award_badges(participant, self.notifications)
        await self.notifications.swap_completed(swap, user)
        await cache_delete(PLATFORM_STATS_CACHE_KEY, f"{LEADERBOARD_CACHE_KEY}10")
        logger.info("swap completed: swap_id=%s eco_impact=%.1f", swap.id, swap.eco_impact)
        return await self.swap_repo.reload(swap)

    async def cancel(self, swap_id: int, user: User, reason: str | None = None) -> Swap:
        swap = await self.get_for_participant(swap_id, user)
        if swap.status not in OPEN_STATUSES:
            raise InvalidOperationError(f"Cannot cancel a swap that is {swap.status}", error="Invalid status")

        if swap.status == SwapStatus.ACCEPTED.value:
            if swap.swap_type == SwapType.POINTS.value:
                if swap.recipient.points < swap.points_offered:
                    raise InvalidOperationError(
                        "The received points have already been spent", error="Cannot refund points"
                    )
                swap.recipient.points -= swap.points_offered
                swap.initiator.points += swap.points_offered
            for item in (swap.requested_item, swap.offered_item):
                if item is not None:
                    item.status = ItemStatus.AVAILABLE.value
                    sync_search_index(item)

        swap.status = SwapStatus.CANCELLED.value
        swap.cancelled_at = utcnow()
        swap.cancelled_by_id = user.id
        swap.cancellation_reason = reason
        await self.notifications.swap_cancelled(swap, user)
        logger.info("swap cancelled: swap_id=%s by user_id=%s", swap.id, user.id)
        return await self.swap_repo.reload(swap)

    # --- Chat & ratings ---

    async def add_message(self, swap_id: int, user: User, text: str) -> SwapMessage:
        swap = await self.get_for_participant(swap_id, user)
        if swap.status not in OPEN_STATUSES:
            raise InvalidOperationError(
                "Messages can only be sent on pending or accepted swaps", error="Invalid status"
            )
        message = SwapMessage(sender_id=user.id, message=text)
        swap.messages.append(message)
        await self.swap_repo.session.flush()
        await self.notifications.new_message(swap, user)
        return message

    async def mark_messages_read(self, swap_id: int, user: User) -> int:
        """Mark the other party's messages read. Returns how many changed."""
        swap = await self.get_for_participant(swap_id, user)
        changed = 0
        for message in swap.messages:
            if message.sender_id != user.id and not message.is_read:
                message.is_read = True
                changed += 1
        await self.swap_repo.session.flush()
        return changed

    async def rate(self, swap_id: int, user: User, rating: int, comment: str | None = None) -> SwapRating:
        swap = await self.get_for_participant(swap_id, user)
        if swap.status != SwapStatus.COMPLETED.value:
            raise InvalidOperationError("Only completed swaps can be rated", error="Invalid status")
        if any(r.rater_id == user.id for r in swap.ratings):
            raise InvalidOperationError("You have already rated this swap", error="Already rated")
        entry = SwapRating(rater_id=user.id, rating=rating, comment=comment)
        swap.ratings.append(entry)
        await self.swap_repo.session.flush()
        return entry
