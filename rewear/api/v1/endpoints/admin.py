"""
Admin endpoints - moderation, user management, dashboard and analytics.
Every route requires role=admin (403 otherwise).
"""

from fastapi import APIRouter, Query

from rewear.core.dependencies import AdminPage, AdminUser
from rewear.core.enums import SwapStatus
from rewear.schemas.admin import AdminUserResponse, AnalyticsResponse, DashboardResponse, RoleUpdate
from rewear.schemas.common import MessageResponse, Page, Pagination
from rewear.schemas.item import ItemRejection, ItemResponse, ItemStatusUpdate
from rewear.schemas.swap import SwapResponse
from rewear.services.factories import AdminSvc
from rewear.services.item_service import item_response

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(admin: AdminUser, svc: AdminSvc):
    return await svc.dashboard()


@router.get("/items/pending", response_model=Page[ItemResponse])
async def pending_items(admin: AdminUser, svc: AdminSvc, page: AdminPage):
    items, total = await svc.pending_items(skip=page.skip, limit=page.limit)
    return Page(
        items=[item_response(i) for i in items],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )


@router.put("/items/{item_id}/approve", response_model=ItemResponse)
async def approve_item(item_id: int, admin: AdminUser, svc: AdminSvc):
    return item_response(await svc.approve_item(item_id, admin))


@router.put("/items/{item_id}/reject", response_model=ItemResponse)
async def reject_item(item_id: int, data: ItemRejection, admin: AdminUser, svc: AdminSvc):
    return item_response(await svc.reject_item(item_id, admin, data.reason))


@router.patch("/items/{item_id}/status", response_model=ItemResponse)
async def set_item_status(item_id: int, data: ItemStatusUpdate, admin: AdminUser, svc: AdminSvc):
    return item_response(await svc.set_item_status(item_id, data.status))


@router.get("/users", response_model=Page[AdminUserResponse])
async def list_users(admin: AdminUser, svc: AdminSvc, page: AdminPage, search: str | None = Query(None, max_length=100)):
    users, total = await svc.users(search.strip() if search else None, skip=page.skip, limit=page.limit)
    return Page(
        items=[AdminUserResponse.model_validate(u) for u in users],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )


@router.put("/users/{user_id}/role", response_model=AdminUserResponse)
async def set_role(user_id: int, data: RoleUpdate, admin: AdminUser, svc: AdminSvc):
    return AdminUserResponse.model_validate(await svc.set_role(user_id, admin, data.role))


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, admin: AdminUser, svc: AdminSvc):
    """Deletes the user with their items, swaps and notifications."""
    await svc.delete_user(user_id, admin)
    return MessageResponse(message="User and associated data deleted")


@router.get("/swaps", response_model=Page[SwapResponse])
async def list_swaps(admin: AdminUser, svc: AdminSvc, page: AdminPage, status: SwapStatus | None = Query(None)):
    swaps, total = await svc.swaps(status.value if status else None, skip=page.skip, limit=page.limit)
    return Page(
        items=[SwapResponse.model_validate(s) for s in swaps],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )


@router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(admin: AdminUser, svc: AdminSvc):
    return await svc.analytics()
