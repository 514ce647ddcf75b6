"""Review-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CreateReviewRequest(BaseModel):
    """Request schema for reviewing a tour."""

    tour_id: UUID = Field(..., description="Reviewed tour ID")
    rating: int = Field(..., ge=1, le=5, description="Rating between 1 and 5")
    comment: str = Field(..., min_length=1, max_length=5000, description="Review text")


class UpdateReviewRequest(BaseModel):
    """Request schema for editing a review."""

    review_id: UUID = Field(..., description="Review ID")
    rating: int | None = Field(None, ge=1, le=5, description="New rating")
    comment: str | None = Field(None, min_length=1, max_length=5000, description="New review text")

    @model_validator(mode="after")
    def check_has_changes(self) -> "UpdateReviewRequest":
        if self.rating is None and self.comment is None:
            raise ValueError("at least one of rating or comment must be provided")
        return self


class DeleteReviewRequest(BaseModel):
    """Request schema for deleting a review."""

    review_id: UUID = Field(..., description="Review ID")


class ListReviewsRequest(BaseModel):
    """Request schema for listing reviews by tour and/or vendor."""

    tour_id: UUID | None = Field(None, description="Filter by tour ID")
    vendor_id: UUID | None = Field(None, description="Filter by vendor ID")


class Review(BaseModel):
    """Review response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Review ID")
    user_id: str = Field(..., description="Author")
    tour_id: UUID = Field(..., description="Reviewed tour")
    vendor_id: UUID | None = Field(None, description="Vendor of the tour at review time")
    rating: int = Field(..., description="Rating between 1 and 5")
    comment: str = Field(..., description="Review text")
    created_at: datetime = Field(..., description="Creation time")


class ReviewList(BaseModel):
    """List of reviews."""

    items: list[Review] = Field(..., description="Reviews")
