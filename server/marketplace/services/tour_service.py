"""Tour service for business logic operations."""

import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Optional, TypeVar
from uuid import UUID

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..core.config import settings
from ..core.exceptions import ConflictError, ConsistencyFailureError, NotFoundError
from ..core.locks import tour_locks
from ..core.observability import metrics_collector
from ..models.tour import Tour, TourBlackoutDay, TourRoomType, TourStatus
from ..schemas.tour import (
    AvailabilityWindow,
    CreateTourRequest,
    RoomTypeInput,
    UpdateTourStatusRequest,
)
from .pricing import price_room_types, resolve_commission_rate
from .vendor_service import VendorService

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_room_types(room_types: list[RoomTypeInput]) -> list[TourRoomType]:
    return [
        TourRoomType(
            position=position,
            name=room_type.name,
            net_price=room_type.net_price,
            child_occupancy=room_type.child_occupancy,
            adult_occupancy=room_type.adult_occupancy,
        )
        for position, room_type in enumerate(room_types)
    ]


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.vendor_service = VendorService(db)

    async def create_tour(self, request: CreateTourRequest) -> Tour:
        """
        Create a new tour and price its room types with the vendor's commission.

        Args:
            request: Tour creation request

        Returns:
            Created tour entity

        Raises:
            NotFoundError: If the vendor does not exist
            ConflictError: If tour with same slug already exists
            ValidationError: If a room type has an invalid net price
        """
        vendor = await self.vendor_service.get_vendor_by_id_or_raise(request.vendor_id)

        existing_tour = await self.get_tour_by_slug(request.slug)
        if existing_tour:
            logger.warning(
                "Tour creation failed - slug already exists",
                extra={
                    "slug": request.slug,
                    "existing_tour_id": str(existing_tour.id)
                }
            )
            raise ConflictError(
                detail=f"Tour with slug '{request.slug}' already exists",
                conflicting_resource={
                    "id": str(existing_tour.id),
                    "slug": existing_tour.slug,
                    "name": existing_tour.name
                }
            )

        window = request.availability_window
        room_types = build_room_types(request.room_types)
        commission_rate = resolve_commission_rate(vendor)
        price_room_types(room_types, commission_rate)

        tour = Tour(
            vendor_id=vendor.id,
            name=request.name,
            slug=request.slug,
            description=request.description,
            currency=request.currency,
            available_from=window.available_from,
            available_to=window.available_to,
            status=TourStatus.PENDING.value,
            room_types=room_types,
            blackout_days=[TourBlackoutDay(day=day) for day in sorted(set(window.blackout_days))],
        )

        try:
            self.db.add(tour)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Tour creation failed due to integrity constraint",
                extra={
                    "slug": request.slug,
                    "tour_name": request.name,
                    "error": str(e)
                }
            )
            raise ConflictError(
                detail=f"Tour with slug '{request.slug}' already exists",
                conflicting_resource={"slug": request.slug}
            ) from e

        tour_id = tour.id
        logger.info(
            "Tour created successfully",
            extra={
                "tour_id": str(tour_id),
                "slug": request.slug,
                "vendor_id": str(vendor.id),
                "commission_rate": str(commission_rate),
                "room_type_count": len(room_types)
            }
        )
        return await self.get_tour_by_id_or_raise(tour_id)

    async def get_tour_by_id(self, tour_id: UUID) -> Optional[Tour]:
        """
        Get tour by ID, overwriting any stale copy in the session.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = (
            select(Tour)
            .where(Tour.id == tour_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_slug(self, slug: str) -> Optional[Tour]:
        """
        Get tour by slug.

        Args:
            slug: Tour slug to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.slug == slug)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: UUID) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour entity

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": str(tour_id)}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=str(tour_id)
            )
        return tour

    async def get_tour_with_lock(self, tour_id: UUID) -> Tour:
        """
        Get tour by ID with advisory lock for derived-field recomputation.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour entity with lock held

        Raises:
            NotFoundError: If tour not found
        """
        # Released at transaction end; SQLite (tests) has no advisory locks
        if self.db.bind and self.db.bind.dialect.name == "postgresql":
            await self.db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:tour_id))"),
                {"tour_id": str(tour_id)}
            )

        tour = await self.get_tour_by_id_or_raise(tour_id)

        logger.debug(
            "Acquired advisory lock for tour",
            extra={"tour_id": str(tour_id)}
        )

        return tour

    async def serialized_write(
        self,
        tour_id: UUID,
        operation: Callable[[], Awaitable[T]],
        operation_name: str,
    ) -> T:
        """
        Run ``operation`` and commit it as one transaction, serialized per tour.

        ``operation`` must (re)load everything it touches, since it may run
        more than once. A stale tour version rolls back and retries.

        Args:
            tour_id: Tour whose derived fields the operation rewrites
            operation: Coroutine factory doing the reads and writes
            operation_name: Label used in logs, metrics and errors

        Returns:
            Whatever ``operation`` returned on the committed attempt

        Raises:
            ConsistencyFailureError: If the tour could not be saved
        """
        max_attempts = max(1, settings.tour_write_max_attempts)

        async with tour_locks.hold(tour_id):
            for attempt in range(1, max_attempts + 1):
                try:
                    result = await operation()
                    await self.db.commit()
                    return result
                except StaleDataError as e:
                    await self.db.rollback()
                    metrics_collector.record_tour_write_retry(operation_name)
                    logger.warning(
                        "Tour changed concurrently, retrying write",
                        extra={
                            "tour_id": str(tour_id),
                            "operation": operation_name,
                            "attempt": attempt,
                            "error": str(e)
                        }
                    )
                except IntegrityError:
                    await self.db.rollback()
                    raise
                except SQLAlchemyError as e:
                    await self.db.rollback()
                    logger.error(
                        "Tour write failed after recomputation",
                        extra={
                            "tour_id": str(tour_id),
                            "operation": operation_name,
                            "attempt": attempt,
                            "error": str(e)
                        }
                    )
                    raise ConsistencyFailureError(
                        tour_id=str(tour_id),
                        operation=operation_name,
                        attempts=attempt
                    ) from e
                except Exception:
                    await self.db.rollback()
                    raise

        logger.error(
            "Tour write abandoned after repeated version conflicts",
            extra={
                "tour_id": str(tour_id),
                "operation": operation_name,
                "attempts": max_attempts
            }
        )
        raise ConsistencyFailureError(
            tour_id=str(tour_id),
            operation=operation_name,
            attempts=max_attempts
        )

    async def update_room_types(self, tour_id: UUID, room_types: list[RoomTypeInput]) -> Tour:
        """
        Replace a tour's room types and re-price them at the vendor's current rate.

        Raises:
            NotFoundError: If tour not found
            ValidationError: If a room type has an invalid net price
        """
        async def operation() -> None:
            tour = await self.get_tour_with_lock(tour_id)
            vendor = None
            if tour.vendor_id is not None:
                vendor = await self.vendor_service.get_vendor_by_id(tour.vendor_id)

            new_room_types = build_room_types(room_types)
            price_room_types(new_room_types, resolve_commission_rate(vendor))
            tour.room_types = new_room_types
            # Child rows alone do not touch the tour row; bump its version explicitly
            tour.updated_at = func.now()

        await self.serialized_write(tour_id, operation, "update_room_types")

        logger.info(
            "Tour room types replaced",
            extra={"tour_id": str(tour_id), "room_type_count": len(room_types)}
        )
        return await self.get_tour_by_id_or_raise(tour_id)

    async def update_availability_window(self, tour_id: UUID, window: AvailabilityWindow) -> Tour:
        """
        Replace a tour's availability window and blackout days.

        Existing availability records are left alone.

        Raises:
            NotFoundError: If tour not found
        """
        async def operation() -> None:
            tour = await self.get_tour_with_lock(tour_id)
            tour.available_from = window.available_from
            tour.available_to = window.available_to

            wanted: set[date] = set(window.blackout_days)
            tour.blackout_days = [
                blackout for blackout in tour.blackout_days if blackout.day in wanted
            ] + [
                TourBlackoutDay(day=day) for day in sorted(wanted - tour.blackout_dates)
            ]
            tour.updated_at = func.now()

        await self.serialized_write(tour_id, operation, "update_availability_window")

        logger.info(
            "Tour availability window replaced",
            extra={
                "tour_id": str(tour_id),
                "available_from": window.available_from.isoformat(),
                "available_to": window.available_to.isoformat(),
                "blackout_day_count": len(set(window.blackout_days))
            }
        )
        return await self.get_tour_by_id_or_raise(tour_id)

    async def set_status(self, request: UpdateTourStatusRequest) -> Tour:
        """
        Apply an admin approval action.

        Raises:
            NotFoundError: If tour not found
        """
        previous: dict[str, str] = {}

        async def operation() -> None:
            tour = await self.get_tour_with_lock(request.tour_id)
            previous["status"] = tour.status
            tour.status = request.status.value
            if request.note is not None:
                tour.note = request.note

        await self.serialized_write(request.tour_id, operation, "set_status")

        logger.info(
            "Tour status changed",
            extra={
                "tour_id": str(request.tour_id),
                "old_status": previous.get("status"),
                "new_status": request.status.value
            }
        )
        return await self.get_tour_by_id_or_raise(request.tour_id)
