"""Swap request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from rewear.core.enums import SwapStatus, SwapType
from rewear.schemas.item import ItemSummary
from rewear.schemas.user import UserSummary


class SwapCreate(BaseModel):
    requested_item_id: int
    swap_type: SwapType
    offered_item_id: int | None = None
    points_offered: int | None = Field(None, ge=0)
    message: str | None = Field(None, max_length=500)


class SwapResponseMessage(BaseModel):
    """Optional note from the recipient when accepting or rejecting."""

    response_message: str | None = Field(None, max_length=500)


class SwapCancel(BaseModel):
    reason: str | None = Field(None, max_length=200)


class ChatMessageCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)

    model_config = {"str_strip_whitespace": True}


class ChatMessageResponse(BaseModel):
    id: int
    sender_id: int
    message: str
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RatingCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=300)


class RatingResponse(BaseModel):
    rater_id: int
    rating: int
    comment: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SwapResponse(BaseModel):
    id: int
    swap_type: SwapType
    status: SwapStatus
    initiator: UserSummary
    recipient: UserSummary
    requested_item: ItemSummary
    offered_item: ItemSummary | None = None
    points_offered: int | None = None
    message: str | None = None
    response_message: str | None = None
    eco_impact: float
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by_id: int | None = None
    cancellation_reason: str | None = None
    messages: list[ChatMessageResponse] = []
    ratings: list[RatingResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
