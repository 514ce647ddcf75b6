"""Availability service for business logic operations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..core.observability import metrics_collector
from ..models.availability import (
    Availability,
    AvailabilityDate,
    AvailabilityDiscount,
    AvailabilityRoomType,
)
from ..schemas.availability import CreateAvailabilityRequest
from .availability_validator import ReapprovalTrigger, flag_for_reapproval, validate_dates
from .pricing import price_room_types, resolve_commission_rate
from .tour_service import TourService

logger = logging.getLogger(__name__)


def _by_first_day(availability: Availability) -> tuple:
    return availability.days[0], str(availability.id)


class AvailabilityService:
    """Service for availability (special day) operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)

    async def create_availability(self, request: CreateAvailabilityRequest) -> list[Availability]:
        """
        Validate, price and store one availability record per requested date.

        Args:
            request: Availability creation request

        Returns:
            Created records ordered by date

        Raises:
            NotFoundError: If tour not found
            InvalidDateRangeError: If any date is outside the window or blacked out
            ValidationError: If a room type has an invalid net price
        """
        tour_id = request.tour_id

        async def operation() -> list[UUID]:
            tour = await self.tour_service.get_tour_with_lock(tour_id)
            days = validate_dates(tour, request.dates)

            vendor = None
            if tour.vendor_id is not None:
                vendor = await self.tour_service.vendor_service.get_vendor_by_id(tour.vendor_id)
            commission_rate = resolve_commission_rate(vendor)

            records = []
            for day in days:
                room_types = [
                    AvailabilityRoomType(
                        position=position,
                        name=room_type.name,
                        net_price=room_type.net_price,
                        child_occupancy=room_type.child_occupancy,
                        adult_occupancy=room_type.adult_occupancy,
                    )
                    for position, room_type in enumerate(request.room_types)
                ]
                price_room_types(room_types, commission_rate)
                records.append(
                    Availability(
                        tour_id=tour.id,
                        dates=[AvailabilityDate(day=day)],
                        room_types=room_types,
                        discounts=[
                            AvailabilityDiscount(
                                position=position,
                                min_users=discount.min_users,
                                discount_percentage=discount.discount_percentage,
                            )
                            for position, discount in enumerate(request.discounts)
                        ],
                    )
                )

            self.db.add_all(records)
            flag_for_reapproval(tour, ReapprovalTrigger.ADDED)
            await self.db.flush()
            return [record.id for record in records]

        record_ids = await self.tour_service.serialized_write(
            tour_id, operation, "create_availability"
        )

        metrics_collector.record_availability_created(len(record_ids))
        logger.info(
            "Availability records created",
            extra={"tour_id": str(tour_id), "record_count": len(record_ids)}
        )

        stmt = (
            select(Availability)
            .where(Availability.id.in_(record_ids))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return sorted(result.scalars().all(), key=_by_first_day)

    async def get_availability_by_id(self, availability_id: UUID) -> Optional[Availability]:
        stmt = select(Availability).where(Availability.id == availability_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_availability_for_tour(self, availability_id: UUID, tour_id: UUID) -> Availability:
        """
        Get one availability record of a tour.

        Raises:
            NotFoundError: If no such record belongs to the tour
        """
        stmt = select(Availability).where(
            Availability.id == availability_id,
            Availability.tour_id == tour_id
        )
        result = await self.db.execute(stmt)
        availability = result.scalar_one_or_none()
        if not availability:
            logger.warning(
                "Availability not found",
                extra={"availability_id": str(availability_id), "tour_id": str(tour_id)}
            )
            raise NotFoundError(
                resource_type="availability",
                resource_id=str(availability_id)
            )
        return availability

    async def list_availability_for_tour(self, tour_id: UUID) -> list[Availability]:
        """
        List a tour's availability records ordered by date.

        Raises:
            NotFoundError: If tour not found
        """
        await self.tour_service.get_tour_by_id_or_raise(tour_id)

        stmt = select(Availability).where(Availability.tour_id == tour_id)
        result = await self.db.execute(stmt)
        return sorted(result.scalars().all(), key=_by_first_day)

    async def delete_availability(self, availability_id: UUID) -> int:
        """
        Remove one availability record and flag its tour for re-approval.

        Returns:
            Number of records removed (always 1)

        Raises:
            NotFoundError: If the record does not exist
        """
        availability = await self.get_availability_by_id(availability_id)
        if not availability:
            logger.warning(
                "Availability not found",
                extra={"availability_id": str(availability_id)}
            )
            raise NotFoundError(
                resource_type="availability",
                resource_id=str(availability_id)
            )
        tour_id = availability.tour_id

        async def operation() -> int:
            tour = await self.tour_service.get_tour_with_lock(tour_id)
            record = await self.get_availability_for_tour(availability_id, tour_id)
            await self.db.delete(record)
            flag_for_reapproval(tour, ReapprovalTrigger.REMOVED)
            await self.db.flush()
            return 1

        deleted = await self.tour_service.serialized_write(
            tour_id, operation, "delete_availability"
        )

        logger.info(
            "Availability record deleted",
            extra={"availability_id": str(availability_id), "tour_id": str(tour_id)}
        )
        return deleted

    async def delete_availability_for_tour(self, tour_id: UUID) -> int:
        """
        Remove every availability record of a tour and flag it for re-approval.

        Returns:
            Number of records removed

        Raises:
            NotFoundError: If the tour does not exist or has no availability
        """
        async def operation() -> int:
            tour = await self.tour_service.get_tour_with_lock(tour_id)

            stmt = select(Availability).where(Availability.tour_id == tour_id)
            records = (await self.db.execute(stmt)).scalars().all()
            if not records:
                raise NotFoundError(
                    resource_type="availability",
                    detail=f"No availability records found for tour '{tour_id}'"
                )

            for record in records:
                await self.db.delete(record)
            flag_for_reapproval(tour, ReapprovalTrigger.ALL_REMOVED)
            await self.db.flush()
            return len(records)

        deleted = await self.tour_service.serialized_write(
            tour_id, operation, "delete_availability_for_tour"
        )

        logger.info(
            "All availability records deleted for tour",
            extra={"tour_id": str(tour_id), "deleted_count": deleted}
        )
        return deleted
