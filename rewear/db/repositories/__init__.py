# Repository pattern: abstract data access behind per-model classes

from rewear.db.repositories.item_repository import ItemFilters, ItemRepository
from rewear.db.repositories.notification_repository import NotificationRepository
from rewear.db.repositories.swap_repository import SwapRepository
from rewear.db.repositories.user_repository import UserRepository

__all__ = ["UserRepository", "ItemRepository", "ItemFilters", "SwapRepository", "NotificationRepository"]
