"""
User model - identity, points balance, role, badges and swap statistics.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from rewear.core.enums import Role
from rewear.db.base import Base, utcnow


def default_preferences() -> dict[str, Any]:
    return {
        "notifications": {"email": True, "push": True, "swap_requests": True, "new_items": True},
        "categories": [],
        "sizes": [],
    }


class User(Base):
    """User entity. Stats are denormalized counters updated by the swap lifecycle."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    points: Mapped[int] = mapped_column(default=10, nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=Role.USER.value, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(default=False, nullable=False)
    badges: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Stats
    total_swaps: Mapped[int] = mapped_column(default=0, nullable=False, index=True)
    items_listed: Mapped[int] = mapped_column(default=0, nullable=False)
    items_received: Mapped[int] = mapped_column(default=0, nullable=False)
    eco_impact: Mapped[float] = mapped_column(Float, default=0.0, nullable=False, index=True)

    preferences: Mapped[dict[str, Any]] = mapped_column(JSON, default=default_preferences, nullable=False)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)

    last_active: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def add_badge(self, badge: str) -> bool:
        """Append badge if missing. Returns True when newly earned."""
        if badge in self.badges:
            return False
        # Reassign so the JSON column is flagged dirty
        self.badges = [*self.badges, badge]
        return True

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
