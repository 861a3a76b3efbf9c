"""Item request/response schemas - listing contract and validation."""

import json
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from rewear.core.enums import Category, Condition, ItemStatus, ItemSwapType, Size
from rewear.schemas.user import PublicUserResponse, UserSummary


def _parse_tags(v):
    """Multipart forms send tags as a JSON array string."""
    if v is None or v == "":
        return []
    if isinstance(v, str):
        try:
            v = json.loads(v)
        except json.JSONDecodeError:
            v = v.split(",")
    if not isinstance(v, list):
        raise ValueError("Tags must be an array")
    return [str(t).strip() for t in v if str(t).strip()]


def _check_tag_length(v: list[str] | None) -> list[str] | None:
    if v and any(len(t) > 20 for t in v):
        raise ValueError("Tags must be at most 20 characters")
    return v


class ItemBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=1000)
    category: Category
    size: Size
    condition: Condition
    points_required: int = Field(..., ge=1, le=100)
    brand: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=30)
    material: str | None = Field(None, max_length=100)
    tags: list[str] = []
    swap_type: ItemSwapType = ItemSwapType.BOTH

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return _parse_tags(v)

    @field_validator("tags")
    @classmethod
    def check_tag_length(cls, v: list[str]) -> list[str]:
        return _check_tag_length(v)


class ItemCreate(ItemBase):
    # Index of the uploaded image to mark primary (defaults to the first)
    primary_image_index: int = Field(0, ge=0)


class ItemUpdate(BaseModel):
    title: str | None = Field(None, min_length=3, max_length=100)
    description: str | None = Field(None, min_length=10, max_length=1000)
    category: Category | None = None
    size: Size | None = None
    condition: Condition | None = None
    points_required: int | None = Field(None, ge=1, le=100)
    brand: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=30)
    material: str | None = Field(None, max_length=100)
    tags: list[str] | None = None
    swap_type: ItemSwapType | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return None if v is None else _parse_tags(v)

    @field_validator("tags")
    @classmethod
    def check_tag_length(cls, v: list[str] | None) -> list[str] | None:
        return _check_tag_length(v)


class ItemImageResponse(BaseModel):
    url: str
    public_id: str
    is_primary: bool

    model_config = {"from_attributes": True}


class ItemSummary(BaseModel):
    """Embedded item reference (swap views, public profile)."""

    id: int
    title: str
    category: Category
    condition: Condition
    points_required: int
    status: ItemStatus
    owner_id: int
    primary_image: str | None = None

    model_config = {"from_attributes": True}


class ItemResponse(ItemBase):
    id: int
    status: ItemStatus
    is_approved: bool
    approved_at: datetime | None = None
    views: int
    likes_count: int
    liked_by: list[int]
    images: list[ItemImageResponse]
    primary_image: str | None = None
    owner_id: int
    owner: UserSummary
    created_at: datetime
    updated_at: datetime


class PublicProfile(BaseModel):
    """Public view of a member with a sample of their listed items."""

    user: PublicUserResponse
    items: list[ItemResponse]


class LikeResponse(BaseModel):
    liked: bool
    likes_count: int


class ItemStatusUpdate(BaseModel):
    status: ItemStatus


class ItemRejection(BaseModel):
    reason: str = Field(..., min_length=1, max_length=200)
