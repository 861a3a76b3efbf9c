"""
Notification model - typed message addressed to one user.
The payload references (sender/item/swap) are plain ids: they describe what the
notification was about and may outlive the referenced rows.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from rewear.core.enums import NotificationPriority, NotificationType
from rewear.db.base import Base, utcnow

_PRIORITY_BY_TYPE = {
    NotificationType.SWAP_REQUEST.value: NotificationPriority.HIGH,
    NotificationType.SWAP_ACCEPTED.value: NotificationPriority.HIGH,
    NotificationType.ITEM_APPROVED.value: NotificationPriority.MEDIUM,
    NotificationType.ITEM_REJECTED.value: NotificationPriority.MEDIUM,
    NotificationType.NEW_MESSAGE.value: NotificationPriority.MEDIUM,
}


def priority_for(notification_type: str) -> str:
    return _PRIORITY_BY_TYPE.get(notification_type, NotificationPriority.LOW).value


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "is_read"),
        Index("ix_notifications_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str] = mapped_column(String(500), nullable=False)
    priority: Mapped[str] = mapped_column(String(10), default=NotificationPriority.LOW.value, nullable=False)
    is_read: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Payload
    sender_id: Mapped[int | None] = mapped_column(nullable=True)
    item_id: Mapped[int | None] = mapped_column(nullable=True)
    swap_id: Mapped[int | None] = mapped_column(nullable=True)
    points: Mapped[int | None] = mapped_column(nullable=True)
    badge: Mapped[str | None] = mapped_column(String(50), nullable=True)
    url: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.type}, user_id={self.user_id})>"
