"""Models module exporting all database models."""

from .availability import Availability, AvailabilityDate, AvailabilityDiscount, AvailabilityRoomType
from .review import Review
from .tour import Tour, TourBlackoutDay, TourRoomType, TourStatus
from .vendor import Vendor

__all__ = [
    # Vendor entity
    "Vendor",

    # Tour entities
    "Tour",
    "TourBlackoutDay",
    "TourRoomType",
    "TourStatus",

    # Availability entities
    "Availability",
    "AvailabilityDate",
    "AvailabilityDiscount",
    "AvailabilityRoomType",

    # Review entity
    "Review",
]
