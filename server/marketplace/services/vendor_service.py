"""Vendor service for business logic operations."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError
from ..models.vendor import Vendor
from ..schemas.vendor import CreateVendorRequest, UpdateCommissionRequest

logger = logging.getLogger(__name__)


class VendorService:
    """Service for vendor-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_vendor(self, request: CreateVendorRequest) -> Vendor:
        """
        Register a vendor.

        Raises:
            ConflictError: If a vendor with the same email exists
        """
        existing = await self.get_vendor_by_email(request.email)
        if existing:
            logger.warning(
                "Vendor creation failed - email already registered",
                extra={"email": request.email, "existing_vendor_id": str(existing.id)}
            )
            raise ConflictError(
                detail=f"Vendor with email '{request.email}' already exists",
                conflicting_resource={"id": str(existing.id), "email": existing.email}
            )

        vendor = Vendor(
            name=request.name,
            email=request.email,
            commission_rate=(
                None if request.commission_rate is None else Decimal(str(request.commission_rate))
            ),
        )

        try:
            self.db.add(vendor)
            await self.db.commit()
            await self.db.refresh(vendor)
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(
                detail=f"Vendor with email '{request.email}' already exists",
                conflicting_resource={"email": request.email}
            ) from e

        logger.info(
            "Vendor created successfully",
            extra={
                "vendor_id": str(vendor.id),
                "commission_rate": str(vendor.commission_rate)
            }
        )
        return vendor

    async def get_vendor_by_id(self, vendor_id: UUID) -> Optional[Vendor]:
        """Get vendor by ID, re-reading the current commission rate."""
        stmt = (
            select(Vendor)
            .where(Vendor.id == vendor_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_vendor_by_email(self, email: str) -> Optional[Vendor]:
        stmt = select(Vendor).where(Vendor.email == email)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_vendor_by_id_or_raise(self, vendor_id: UUID) -> Vendor:
        """
        Get vendor by ID or raise NotFoundError.

        Raises:
            NotFoundError: If vendor not found
        """
        vendor = await self.get_vendor_by_id(vendor_id)
        if not vendor:
            logger.warning(
                "Vendor not found",
                extra={"vendor_id": str(vendor_id)}
            )
            raise NotFoundError(
                resource_type="vendor",
                resource_id=str(vendor_id)
            )
        return vendor

    async def update_commission_rate(self, request: UpdateCommissionRequest) -> Vendor:
        """
        Change a vendor's commission rate.

        Prices already derived on tours and availability records are kept;
        the new rate applies the next time those room types are saved.

        Raises:
            NotFoundError: If vendor not found
        """
        vendor = await self.get_vendor_by_id_or_raise(request.vendor_id)
        old_rate = vendor.commission_rate
        vendor.commission_rate = Decimal(str(request.commission_rate))

        await self.db.commit()
        await self.db.refresh(vendor)

        logger.info(
            "Vendor commission rate updated",
            extra={
                "vendor_id": str(vendor.id),
                "old_rate": str(old_rate),
                "new_rate": str(vendor.commission_rate)
            }
        )
        return vendor
