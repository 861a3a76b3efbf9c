"""
Notification service - creates typed notifications and manages the inbox.
Every created notification is also published on the user's Redis channel so
real-time subscribers can push it. Publishing waits for the request session to
commit (a rolled-back notification is never announced) and never fails the request.
"""

import logging

from rewear.cache.redis_client import defer_event
from rewear.core.enums import NotificationType
from rewear.core.exceptions import NotFoundError
from rewear.db.models.item import Item
from rewear.db.models.notification import Notification, priority_for
from rewear.db.models.swap import Swap
from rewear.db.models.user import User
from rewear.db.repositories.notification_repository import NotificationRepository
from rewear.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, notification_repo: NotificationRepository):
        self.repo = notification_repo

    async def notify(
        self,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        **payload,
    ) -> Notification:
        notification = await self.repo.add(
            Notification(
                user_id=user_id,
                type=type.value,
                title=title,
                message=message,
                priority=priority_for(type.value),
                **payload,
            )
        )
        defer_event(
            self.repo.session.info,
            user_id,
            "notification",
            NotificationResponse.from_model(notification).model_dump(mode="json"),
        )
        return notification

    # --- Typed creators used by the other services ---

    async def welcome(self, user: User) -> Notification:
        return await self.notify(
            user.id,
            NotificationType.SYSTEM_ANNOUNCEMENT,
            "Welcome to ReWear!",
            f"Hi {user.name}, you start with {user.points} points. List an item to get swapping.",
            points=user.points,
        )

    async def swap_request(self, swap: Swap, initiator: User, item: Item) -> Notification:
        return await self.notify(
            swap.recipient_id,
            NotificationType.SWAP_REQUEST,
            "New Swap Request",
            f'{initiator.name} wants to swap for your "{item.title}"',
            sender_id=initiator.id,
            item_id=item.id,
            swap_id=swap.id,
            url=f"/swaps/{swap.id}",
        )

    async def swap_accepted(self, swap: Swap, recipient: User) -> Notification:
        return await self.notify(
            swap.initiator_id,
            NotificationType.SWAP_ACCEPTED,
            "Swap Accepted",
            f'{recipient.name} accepted your swap request for "{swap.requested_item.title}"',
            sender_id=recipient.id,
            item_id=swap.requested_item_id,
            swap_id=swap.id,
            url=f"/swaps/{swap.id}",
        )

    async def swap_rejected(self, swap: Swap, recipient: User | None = None) -> Notification:
        sender = f"{recipient.name} declined" if recipient else "The owner declined"
        return await self.notify(
            swap.initiator_id,
            NotificationType.SWAP_REJECTED,
            "Swap Declined",
            f'{sender} your swap request for "{swap.requested_item.title}"',
            sender_id=swap.recipient_id,
            item_id=swap.requested_item_id,
            swap_id=swap.id,
            url=f"/swaps/{swap.id}",
        )

    async def swap_completed(self, swap: Swap, actor: User) -> Notification:
        return await self.notify(
            swap.other_party_id(actor.id),
            NotificationType.SWAP_COMPLETED,
            "Swap Completed",
            f'Your swap for "{swap.requested_item.title}" is complete. Thanks for swapping!',
            sender_id=actor.id,
            item_id=swap.requested_item_id,
            swap_id=swap.id,
            url=f"/swaps/{swap.id}",
        )

    async def swap_cancelled(self, swap: Swap, actor: User) -> Notification:
        return await self.notify(
            swap.other_party_id(actor.id),
            NotificationType.SWAP_CANCELLED,
            "Swap Cancelled",
            f'{actor.name} cancelled the swap for "{swap.requested_item.title}"',
            sender_id=actor.id,
            item_id=swap.requested_item_id,
            swap_id=swap.id,
            url=f"/swaps/{swap.id}",
        )

    async def new_message(self, swap: Swap, sender: User) -> Notification:
        return await self.notify(
            swap.other_party_id(sender.id),
            NotificationType.NEW_MESSAGE,
            "New Message",
            f"{sender.name} sent you a message",
            sender_id=sender.id,
            swap_id=swap.id,
            url=f"/swaps/{swap.id}",
        )

    async def item_approved(self, item: Item) -> Notification:
        return await self.notify(
            item.owner_id,
            NotificationType.ITEM_APPROVED,
            "Item Approved",
            f'Your item "{item.title}" has been approved and is now listed',
            item_id=item.id,
            url=f"/items/{item.id}",
        )

    async def item_rejected(self, item: Item, reason: str) -> Notification:
        return await self.notify(
            item.owner_id,
            NotificationType.ITEM_REJECTED,
            "Item Rejected",
            f'Your item "{item.title}" was rejected: {reason}',
            item_id=item.id,
        )

    async def points_earned(self, user_id: int, points: int, reason: str) -> Notification:
        return await self.notify(
            user_id,
            NotificationType.POINTS_EARNED,
            "Points Earned",
            f"You earned {points} points {reason}",
            points=points,
        )

    async def badge_earned(self, user_id: int, badge: str) -> Notification:
        return await self.notify(
            user_id,
            NotificationType.BADGE_EARNED,
            "Badge Earned",
            f'Congratulations! You earned the "{badge}" badge',
            badge=badge,
        )

    # --- Inbox ---

    async def list_for_user(
        self, user_id: int, *, unread_only: bool = False, type: str | None = None, skip: int, limit: int
    ) -> tuple[list[Notification], int]:
        return await self.repo.for_user(user_id, unread_only=unread_only, type=type, skip=skip, limit=limit)

    async def unread_count(self, user_id: int) -> int:
        return await self.repo.unread_count(user_id)

    async def _owned(self, notification_id: int, user_id: int) -> Notification:
        notification = await self.repo.get_by_id(notification_id)
        # Other users' notifications are reported as missing
        if not notification or notification.user_id != user_id:
            raise NotFoundError("Notification not found", error="Notification not found")
        return notification

    async def mark_read(self, notification_id: int, user_id: int) -> Notification:
        notification = await self._owned(notification_id, user_id)
        notification.is_read = True
        return await self.repo.reload(notification)

    async def mark_all_read(self, user_id: int) -> None:
        await self.repo.mark_all_read(user_id)

    async def delete(self, notification_id: int, user_id: int) -> None:
        notification = await self._owned(notification_id, user_id)
        await self.repo.delete(notification)

    async def clear_all(self, user_id: int) -> None:
        await self.repo.delete_for_user(user_id)
