"""Marketplace vocabularies shared by ORM models, schemas and services."""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Category(str, Enum):
    TOPS = "Tops"
    BOTTOMS = "Bottoms"
    DRESSES = "Dresses"
    OUTERWEAR = "Outerwear"
    SHOES = "Shoes"
    ACCESSORIES = "Accessories"
    SPORTSWEAR = "Sportswear"


class Size(str, Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"
    ONE_SIZE = "One Size"


class Condition(str, Enum):
    NEW = "New"
    LIKE_NEW = "Like New"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class ItemStatus(str, Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    SWAPPED = "swapped"
    REMOVED = "removed"


class ItemSwapType(str, Enum):
    """Which kinds of offer an owner accepts for a listing."""

    DIRECT = "direct"
    POINTS = "points"
    BOTH = "both"


class SwapType(str, Enum):
    DIRECT = "direct"
    POINTS = "points"


class SwapStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Badge(str, Enum):
    FIRST_SWAP = "First Swap"
    FREQUENT_SWAPPER = "Frequent Swapper"
    COMMUNITY_LEADER = "Community Leader"
    ECO_HERO = "Eco Hero"
    TOP_CONTRIBUTOR = "Top Contributor"


class NotificationType(str, Enum):
    SWAP_REQUEST = "swap_request"
    SWAP_ACCEPTED = "swap_accepted"
    SWAP_REJECTED = "swap_rejected"
    SWAP_COMPLETED = "swap_completed"
    SWAP_CANCELLED = "swap_cancelled"
    ITEM_APPROVED = "item_approved"
    ITEM_REJECTED = "item_rejected"
    NEW_MESSAGE = "new_message"
    POINTS_EARNED = "points_earned"
    BADGE_EARNED = "badge_earned"
    SYSTEM_ANNOUNCEMENT = "system_announcement"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
