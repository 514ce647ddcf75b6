"""Tour-related Pydantic schemas."""

from datetime import date
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import CalendarDate


class TourStatusValue(str, Enum):
    """Approval states an admin can move a tour into."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class RoomTypeInput(BaseModel):
    """Room/rate definition as submitted by a vendor."""

    name: str = Field(..., min_length=1, max_length=255, description="Room type name")
    net_price: int = Field(..., ge=0, description="Vendor net price in minor units (e.g., cents)")
    child_occupancy: int = Field(0, ge=0, description="Children per room")
    adult_occupancy: int = Field(1, ge=0, description="Adults per room")


class RoomType(BaseModel):
    """Room type response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Room type ID")
    name: str = Field(..., description="Room type name")
    net_price: int = Field(..., description="Net price in minor units")
    derived_price: int | None = Field(None, description="Customer price in minor units, commission included")
    child_occupancy: int = Field(..., description="Children per room")
    adult_occupancy: int = Field(..., description="Adults per room")


class AvailabilityWindow(BaseModel):
    """Bookable date range of a tour with its blackout days."""

    available_from: CalendarDate = Field(..., description="First bookable date (inclusive)")
    available_to: CalendarDate = Field(..., description="Last bookable date (inclusive)")
    blackout_days: list[CalendarDate] = Field(default_factory=list, description="Non-bookable dates")

    @model_validator(mode="after")
    def check_window_order(self) -> "AvailabilityWindow":
        if self.available_from > self.available_to:
            raise ValueError("available_from must not be after available_to")
        return self


class CreateTourRequest(BaseModel):
    """Request schema for creating a tour."""

    vendor_id: UUID = Field(..., description="Owning vendor ID")
    name: str = Field(..., min_length=1, max_length=255, description="Tour name")
    slug: str = Field(..., min_length=1, max_length=255, pattern=r"^[a-z0-9-]+$", description="URL-friendly slug")
    description: str = Field(..., min_length=1, max_length=2000, description="Tour description")
    currency: str = Field("USD", min_length=3, max_length=3, pattern=r"^[A-Z]{3}$", description="ISO 4217 currency code")
    availability_window: AvailabilityWindow = Field(..., description="Bookable date range")
    room_types: list[RoomTypeInput] = Field(default_factory=list, description="Room/rate definitions")


class GetTourRequest(BaseModel):
    """Request schema for fetching a tour."""

    tour_id: UUID = Field(..., description="Tour ID")


class UpdateRoomTypesRequest(BaseModel):
    """Request schema for replacing a tour's room types."""

    tour_id: UUID = Field(..., description="Tour ID")
    room_types: list[RoomTypeInput] = Field(..., description="New room/rate definitions")


class UpdateAvailabilityWindowRequest(BaseModel):
    """Request schema for replacing a tour's availability window."""

    tour_id: UUID = Field(..., description="Tour ID")
    availability_window: AvailabilityWindow = Field(..., description="New bookable date range")


class UpdateTourStatusRequest(BaseModel):
    """Request schema for an admin approval action."""

    tour_id: UUID = Field(..., description="Tour ID")
    status: TourStatusValue = Field(..., description="Target status")
    note: str | None = Field(None, max_length=2000, description="Reviewer note shown to the vendor")


class Ratings(BaseModel):
    """Aggregate rating of a tour."""

    average: float = Field(..., ge=0, le=5, description="Mean rating rounded to one decimal")
    count: int = Field(..., ge=0, description="Number of reviews")


class Tour(BaseModel):
    """Tour response schema."""

    id: UUID = Field(..., description="Unique tour ID")
    vendor_id: UUID | None = Field(None, description="Owning vendor ID")
    name: str = Field(..., description="Tour name")
    slug: str = Field(..., description="URL-friendly slug")
    description: str | None = Field(None, description="Tour description")
    currency: str = Field(..., description="ISO 4217 currency code")
    available_from: date = Field(..., description="First bookable date")
    available_to: date = Field(..., description="Last bookable date")
    blackout_days: list[date] = Field(..., description="Non-bookable dates")
    room_types: list[RoomType] = Field(..., description="Room/rate definitions")
    ratings: Ratings = Field(..., description="Aggregate rating")
    status: TourStatusValue = Field(..., description="Approval status")
    note: str | None = Field(None, description="Latest reviewer or system note")
