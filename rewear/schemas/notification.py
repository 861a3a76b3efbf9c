"""Notification response schemas."""

from datetime import datetime

from pydantic import BaseModel

from rewear.core.enums import NotificationPriority, NotificationType


class NotificationPayload(BaseModel):
    sender_id: int | None = None
    item_id: int | None = None
    swap_id: int | None = None
    points: int | None = None
    badge: str | None = None
    url: str | None = None


class NotificationResponse(BaseModel):
    id: int
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority
    is_read: bool
    data: NotificationPayload
    created_at: datetime

    @classmethod
    def from_model(cls, n) -> "NotificationResponse":
        return cls(
            id=n.id,
            type=n.type,
            title=n.title,
            message=n.message,
            priority=n.priority,
            is_read=n.is_read,
            data=NotificationPayload(
                sender_id=n.sender_id,
                item_id=n.item_id,
                swap_id=n.swap_id,
                points=n.points,
                badge=n.badge,
                url=n.url,
            ),
            created_at=n.created_at,
        )


class UnreadCount(BaseModel):
    unread_count: int
