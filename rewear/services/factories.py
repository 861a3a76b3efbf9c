"""
Service factories - wire repositories into services per request session
(Dependency Inversion: endpoints depend on services, not on SQL).
"""

from typing import Annotated

from fastapi import Depends

from rewear.db.repositories import ItemRepository, NotificationRepository, SwapRepository, UserRepository
from rewear.db.session import DbSession
from rewear.services.admin_service import AdminService
from rewear.services.item_service import ItemService
from rewear.services.notification_service import NotificationService
from rewear.services.swap_service import SwapService
from rewear.services.user_service import UserService


def get_notification_service(session: DbSession) -> NotificationService:
    return NotificationService(NotificationRepository(session))


def get_user_service(session: DbSession) -> UserService:
    return UserService(
        UserRepository(session),
        ItemRepository(session),
        SwapRepository(session),
        get_notification_service(session),
    )


def get_item_service(session: DbSession) -> ItemService:
    return ItemService(ItemRepository(session), SwapRepository(session), get_notification_service(session))


def get_swap_service(session: DbSession) -> SwapService:
    return SwapService(SwapRepository(session), ItemRepository(session), get_notification_service(session))


def get_admin_service(session: DbSession) -> AdminService:
    return AdminService(
        UserRepository(session),
        ItemRepository(session),
        SwapRepository(session),
        NotificationRepository(session),
        get_notification_service(session),
    )


NotificationSvc = Annotated[NotificationService, Depends(get_notification_service)]
UserSvc = Annotated[UserService, Depends(get_user_service)]
ItemSvc = Annotated[ItemService, Depends(get_item_service)]
SwapSvc = Annotated[SwapService, Depends(get_swap_service)]
AdminSvc = Annotated[AdminService, Depends(get_admin_service)]
