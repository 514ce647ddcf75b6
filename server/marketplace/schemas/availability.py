"""Availability-related Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .common import CalendarDate
from .tour import RoomType, RoomTypeInput


class DiscountInput(BaseModel):
    """Group discount definition."""

    min_users: int = Field(..., gt=0, description="Minimum party size for the discount")
    discount_percentage: float = Field(..., ge=0, le=100, description="Discount percentage")


class Discount(DiscountInput):
    """Group discount response schema."""

    model_config = ConfigDict(from_attributes=True)


class CreateAvailabilityRequest(BaseModel):
    """Request schema for adding special days to a tour."""

    tour_id: UUID = Field(..., description="Tour ID")
    dates: list[CalendarDate] = Field(..., min_length=1, description="Dates to open; one record is stored per date")
    room_types: list[RoomTypeInput] = Field(..., description="Room/rate definitions for these dates")
    discounts: list[DiscountInput] = Field(default_factory=list, description="Group discounts")


class GetAvailabilityRequest(BaseModel):
    """Request schema for fetching one availability record of a tour."""

    availability_id: UUID = Field(..., description="Availability ID")
    tour_id: UUID = Field(..., description="Tour ID the record must belong to")


class ListAvailabilityRequest(BaseModel):
    """Request schema for listing a tour's availability records."""

    tour_id: UUID = Field(..., description="Tour ID")


class DeleteAvailabilityRequest(BaseModel):
    """Request schema for removing one availability record."""

    availability_id: UUID = Field(..., description="Availability ID")


class DeleteTourAvailabilityRequest(BaseModel):
    """Request schema for removing every availability record of a tour."""

    tour_id: UUID = Field(..., description="Tour ID")


class Availability(BaseModel):
    """Availability response schema."""

    id: UUID = Field(..., description="Availability ID")
    tour_id: UUID = Field(..., description="Tour ID")
    dates: list[date] = Field(..., description="Covered dates")
    room_types: list[RoomType] = Field(..., description="Priced room types")
    discounts: list[Discount] = Field(..., description="Group discounts")
    created_at: datetime = Field(..., description="Creation time")


class AvailabilityList(BaseModel):
    """List of availability records."""

    items: list[Availability] = Field(..., description="Availability records")


class DeleteAvailabilityResponse(BaseModel):
    """Result of an availability deletion."""

    deleted_count: int = Field(..., ge=0, description="Number of records removed")
    message: str = Field(..., description="Human-readable summary")
