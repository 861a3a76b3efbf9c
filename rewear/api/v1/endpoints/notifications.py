"""
Notification endpoints - the authenticated user's inbox.
"""

from fastapi import APIRouter, Query

from rewear.core.dependencies import CurrentUser, NotificationPage
from rewear.core.enums import NotificationType
from rewear.schemas.common import MessageResponse, Page, Pagination
from rewear.schemas.notification import NotificationResponse, UnreadCount
from rewear.services.factories import NotificationSvc

router = APIRouter()


async def _page(svc, user, page, *, unread_only=False, type=None) -> Page[NotificationResponse]:
    notifications, total = await svc.list_for_user(
        user.id, unread_only=unread_only, type=type, skip=page.skip, limit=page.limit
    )
    return Page(
        items=[NotificationResponse.from_model(n) for n in notifications],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )


@router.get("", response_model=Page[NotificationResponse])
async def list_notifications(
    user: CurrentUser, svc: NotificationSvc, page: NotificationPage, unread_only: bool = Query(False)
):
    return await _page(svc, user, page, unread_only=unread_only)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(user: CurrentUser, svc: NotificationSvc):
    return UnreadCount(unread_count=await svc.unread_count(user.id))


@router.get("/types", response_model=list[str])
async def notification_types(user: CurrentUser):
    return [t.value for t in NotificationType]


@router.get("/by-type/{type}", response_model=Page[NotificationResponse])
async def notifications_by_type(type: NotificationType, user: CurrentUser, svc: NotificationSvc, page: NotificationPage):
    return await _page(svc, user, page, type=type.value)


@router.put("/mark-all-read", response_model=MessageResponse)
async def mark_all_read(user: CurrentUser, svc: NotificationSvc):
    await svc.mark_all_read(user.id)
    return MessageResponse(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: int, user: CurrentUser, svc: NotificationSvc):
    return NotificationResponse.from_model(await svc.mark_read(notification_id, user.id))


@router.delete("/clear-all", response_model=MessageResponse)
async def clear_all(user: CurrentUser, svc: NotificationSvc):
    await svc.clear_all(user.id)
    return MessageResponse(message="All notifications cleared")


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: int, user: CurrentUser, svc: NotificationSvc):
    await svc.delete(notification_id, user.id)
    return MessageResponse(message="Notification deleted")
