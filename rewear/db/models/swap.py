"""
Swap model - an exchange proposal between two users, its chat and ratings.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rewear.core.enums import SwapStatus
from rewear.db.base import Base, utcnow

if TYPE_CHECKING:
    from rewear.db.models.item import Item
    from rewear.db.models.user import User


class SwapMessage(Base):
    __tablename__ = "swap_messages"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    swap_id: Mapped[int] = mapped_column(ForeignKey("swaps.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class SwapRating(Base):
    __tablename__ = "swap_ratings"
    __table_args__ = (UniqueConstraint("swap_id", "rater_id", name="uq_swap_ratings_swap_rater"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    swap_id: Mapped[int] = mapped_column(ForeignKey("swaps.id", ondelete="CASCADE"), nullable=False, index=True)
    rater_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    rating: Mapped[int] = mapped_column(nullable=False)
    comment: Mapped[str | None] = mapped_column(String(300), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Swap(Base):
    """Swap entity. Transitions are one-way; terminal swaps never reopen."""

    __tablename__ = "swaps"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    initiator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    recipient_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    requested_item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    offered_item_id: Mapped[int | None] = mapped_column(ForeignKey("items.id"), nullable=True, index=True)
    points_offered: Mapped[int | None] = mapped_column(nullable=True)
    swap_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=SwapStatus.PENDING.value, nullable=False, index=True)
    message: Mapped[str | None] = mapped_column(String(500), nullable=True)
    response_message: Mapped[str | None] = mapped_column(String(500), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(String(200), nullable=True)
    eco_impact: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    initiator: Mapped["User"] = relationship("User", foreign_keys=[initiator_id], lazy="selectin")
    recipient: Mapped["User"] = relationship("User", foreign_keys=[recipient_id], lazy="selectin")
    requested_item: Mapped["Item"] = relationship("Item", foreign_keys=[requested_item_id], lazy="selectin")
    offered_item: Mapped[Optional["Item"]] = relationship("Item", foreign_keys=[offered_item_id], lazy="selectin")
    messages: Mapped[list[SwapMessage]] = relationship(
        SwapMessage,
        order_by=SwapMessage.id,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    ratings: Mapped[list[SwapRating]] = relationship(
        SwapRating,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.initiator_id, self.recipient_id)

    def other_party_id(self, user_id: int) -> int:
        return self.recipient_id if user_id == self.initiator_id else self.initiator_id

    def __repr__(self) -> str:
        return f"<Swap(id={self.id}, status={self.status})>"
