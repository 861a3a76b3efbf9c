"""Admin dashboard and moderation schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr

from rewear.core.enums import Role
from rewear.schemas.item import ItemSummary
from rewear.schemas.swap import SwapResponse


class AdminUserResponse(BaseModel):
    id: int
    email: EmailStr
    name: str
    role: Role
    points: int
    is_active: bool
    total_swaps: int
    eco_impact: float
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleUpdate(BaseModel):
    role: Role


class DashboardTotals(BaseModel):
    total_users: int
    total_items: int
    pending_items: int
    total_swaps: int
    completed_swaps: int
    total_eco_impact: float
    average_eco_impact: float


class DashboardRecent(BaseModel):
    users: list[AdminUserResponse]
    items: list[ItemSummary]
    swaps: list[SwapResponse]


class DashboardResponse(BaseModel):
    stats: DashboardTotals
    recent: DashboardRecent


class MonthlyCount(BaseModel):
    year: int
    month: int
    count: int


class AnalyticsResponse(BaseModel):
    users: dict[str, int]
    items: dict[str, int]
    swaps: dict[str, int]
    eco_impact: dict[str, float]
    trends: dict[str, list[MonthlyCount]]
