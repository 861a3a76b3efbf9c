"""
User endpoints - own profile, listings, swaps and stats; public profiles.
Static paths are declared before /{user_id}.
"""

from fastapi import APIRouter, Query

from rewear.core.dependencies import CurrentUser, ItemPage, SwapPage
from rewear.core.enums import ItemStatus, SwapStatus
from rewear.schemas.common import Page, Pagination
from rewear.schemas.item import ItemResponse, PublicProfile
from rewear.schemas.swap import SwapResponse
from rewear.schemas.user import (
    DashboardStats,
    PointsAdd,
    PointsBalance,
    ProfileUpdate,
    UserResponse,
)
from rewear.services.factories import ItemSvc, SwapSvc, UserSvc
from rewear.services.item_service import item_response
from rewear.services.user_service import user_response

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(user: CurrentUser):
    return user_response(user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(data: ProfileUpdate, user: CurrentUser, svc: UserSvc):
    return await svc.update_profile(user, data)


@router.get("/items", response_model=Page[ItemResponse])
async def my_items(user: CurrentUser, svc: ItemSvc, page: ItemPage, status: ItemStatus | None = Query(None)):
    """Every item the user owns, including pending and removed ones."""
    items, total = await svc.owned_by(
        user, status=status.value if status else None, skip=page.skip, limit=page.limit
    )
    return Page(
        items=[item_response(i) for i in items],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )


@router.get("/swaps", response_model=Page[SwapResponse])
async def my_swaps(user: CurrentUser, svc: SwapSvc, page: SwapPage, status: SwapStatus | None = Query(None)):
    swaps, total = await svc.list_for_user(
        user, status=status.value if status else None, skip=page.skip, limit=page.limit
    )
    return Page(
        items=[SwapResponse.model_validate(s) for s in swaps],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )


@router.get("/stats", response_model=DashboardStats)
async def my_stats(user: CurrentUser, svc: UserSvc):
    return await svc.dashboard_stats(user)


@router.post("/points/add", response_model=PointsBalance)
async def add_points(data: PointsAdd, user: CurrentUser, svc: UserSvc):
    balance = await svc.add_points(user, data.amount)
    return PointsBalance(message=f"Added {data.amount} points", new_balance=balance)


@router.get("/{user_id}", response_model=PublicProfile)
async def public_profile(user_id: int, svc: UserSvc):
    """Public profile with up to six listed items."""
    profile, items = await svc.public_profile(user_id)
    return PublicProfile(user=profile, items=[item_response(i) for i in items])


@router.get("/{user_id}/items", response_model=Page[ItemResponse])
async def public_items(user_id: int, user_svc: UserSvc, svc: ItemSvc, page: ItemPage):
    await user_svc.get_active(user_id)
    items, total = await svc.listed_by_user(user_id, skip=page.skip, limit=page.limit)
    return Page(
        items=[item_response(i) for i in items],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )
