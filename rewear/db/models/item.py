"""
Item model - a garment listing with its images and likes.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rewear.core.enums import ItemStatus, ItemSwapType
from rewear.db.base import Base, utcnow

if TYPE_CHECKING:
    from rewear.db.models.user import User


item_likes = Table(
    "item_likes",
    Base.metadata,
    Column("item_id", ForeignKey("items.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class ItemImage(Base):
    """Image hosted on the media host. Exactly one image per item is primary."""

    __tablename__ = "item_images"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    public_id: Mapped[str] = mapped_column(String(255), nullable=False)
    is_primary: Mapped[bool] = mapped_column(default=False, nullable=False)
    position: Mapped[int] = mapped_column(default=0, nullable=False)


class Item(Base):
    """Item entity. Created pending admin approval; edits reset approval."""

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    size: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    condition: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    brand: Mapped[str | None] = mapped_column(String(50), nullable=True)
    color: Mapped[str | None] = mapped_column(String(30), nullable=True)
    material: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    points_required: Mapped[int] = mapped_column(nullable=False, index=True)
    swap_type: Mapped[str] = mapped_column(String(20), default=ItemSwapType.BOTH.value, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=ItemStatus.PENDING.value, nullable=False, index=True)
    is_approved: Mapped[bool] = mapped_column(default=False, nullable=False)
    approved_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    views: Mapped[int] = mapped_column(default=0, nullable=False)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    owner: Mapped["User"] = relationship("User", foreign_keys=[owner_id], lazy="selectin")
    images: Mapped[list[ItemImage]] = relationship(
        ItemImage,
        order_by=ItemImage.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    liked_by: Mapped[list["User"]] = relationship("User", secondary=item_likes, lazy="selectin")

    @property
    def primary_image(self) -> str | None:
        for image in self.images:
            if image.is_primary:
                return image.url
        return self.images[0].url if self.images else None

    @property
    def is_listed(self) -> bool:
        """Visible to other users and open to swap requests."""
        return self.is_approved and self.status == ItemStatus.AVAILABLE.value

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, title={self.title})>"
