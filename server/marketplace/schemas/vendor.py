"""Vendor-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CreateVendorRequest(BaseModel):
    """Request schema for registering a vendor."""

    name: str = Field(..., min_length=1, max_length=255, description="Vendor name")
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$", description="Contact email")
    commission_rate: float | None = Field(
        15,
        ge=0,
        le=100,
        description="Commission percentage added to net prices; null uses the platform default"
    )


class GetVendorRequest(BaseModel):
    """Request schema for fetching a vendor."""

    vendor_id: UUID = Field(..., description="Vendor ID")


class UpdateCommissionRequest(BaseModel):
    """Request schema for changing a vendor's commission rate."""

    vendor_id: UUID = Field(..., description="Vendor ID")
    commission_rate: float = Field(..., ge=0, le=100, description="New commission percentage")


class Vendor(BaseModel):
    """Vendor response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Unique vendor ID")
    name: str = Field(..., description="Vendor name")
    email: str = Field(..., description="Contact email")
    commission_rate: float | None = Field(None, description="Commission percentage")
