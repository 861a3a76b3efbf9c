"""User request/response schemas - registration, profile, stats."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator

from rewear.core.enums import Category, Role, Size


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=2, max_length=100)
    # bcrypt accepts max 72 bytes; validate here for a clear 400
    password: str = Field(..., min_length=6, max_length=72)
    avatar: HttpUrl | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be between 2 and 100 characters")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True
    swap_requests: bool = True
    new_items: bool = True


class Preferences(BaseModel):
    notifications: NotificationPreferences = NotificationPreferences()
    categories: list[Category] = []
    sizes: list[Size] = []


class UserSummary(BaseModel):
    """Embedded user reference (item owner, swap party)."""

    id: int
    name: str
    avatar: str | None = None

    model_config = {"from_attributes": True}


class UserStats(BaseModel):
    total_swaps: int
    items_listed: int
    items_received: int
    eco_impact: float

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    """Private profile of the authenticated user."""

    id: int
    email: EmailStr
    name: str
    avatar: str | None = None
    points: int
    role: Role
    is_verified: bool
    badges: list[str]
    stats: UserStats
    preferences: Preferences
    city: str | None = None
    country: str | None = None
    last_active: datetime | None = None
    created_at: datetime


class ProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    avatar: HttpUrl | None = None
    preferences: Preferences | None = None
    city: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)


class PublicUserResponse(BaseModel):
    id: int
    name: str
    avatar: str | None = None
    stats: UserStats
    badges: list[str]
    member_since: datetime


class DashboardStats(UserStats):
    """Personal dashboard counters (GET /users/stats)."""

    total_items: int
    available_items: int
    pending_items: int
    swaps_involved: int
    pending_swaps: int
    points: int
    badges: list[str]


class LeaderboardEntry(BaseModel):
    id: int
    name: str
    avatar: str | None = None
    eco_impact: float
    total_swaps: int
    badges: list[str]

    model_config = {"from_attributes": True}


class PlatformStats(BaseModel):
    total_users: int
    total_items: int
    total_swaps: int
    total_eco_impact: float
    average_eco_impact: float


class PointsAdd(BaseModel):
    amount: int = Field(..., ge=1, le=100)


class PointsBalance(BaseModel):
    message: str
    new_balance: int
