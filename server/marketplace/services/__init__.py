"""Service layer package."""

from .availability_service import AvailabilityService
from .rating_aggregator import RatingAggregator
from .review_service import ReviewService
from .tour_service import TourService
from .vendor_service import VendorService

__all__ = [
    "AvailabilityService",
    "RatingAggregator",
    "ReviewService",
    "TourService",
    "VendorService",
]
