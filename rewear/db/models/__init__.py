from rewear.db.models.item import Item, ItemImage, item_likes
from rewear.db.models.notification import Notification
from rewear.db.models.swap import Swap, SwapMessage, SwapRating
from rewear.db.models.user import User

__all__ = ["User", "Item", "ItemImage", "item_likes", "Swap", "SwapMessage", "SwapRating", "Notification"]
