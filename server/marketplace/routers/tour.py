"""Tour router for tour management operations."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import ProblemDetailsException
from ..models.tour import Tour as TourModel
from ..schemas.tour import (
    CreateTourRequest,
    GetTourRequest,
    Ratings,
    RoomType,
    Tour,
    TourStatusValue,
    UpdateAvailabilityWindowRequest,
    UpdateRoomTypesRequest,
    UpdateTourStatusRequest,
)
from ..services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/tour", tags=["tour"])


def _convert_tour_to_schema(tour: TourModel) -> Tour:
    """Convert a Tour model with its room types and blackout days to the response schema."""
    return Tour(
        id=tour.id,
        vendor_id=tour.vendor_id,
        name=tour.name,
        slug=tour.slug,
        description=tour.description,
        currency=tour.currency,
        available_from=tour.available_from,
        available_to=tour.available_to,
        blackout_days=sorted(tour.blackout_dates),
        room_types=[RoomType.model_validate(room_type) for room_type in tour.room_types],
        ratings=Ratings(average=tour.rating_average, count=tour.rating_count),
        status=TourStatusValue(tour.status),
        note=tour.note,
    )


def _tour_response(tour: TourModel) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=_convert_tour_to_schema(tour).model_dump(mode="json")
    )


@router.post("/create", response_model=Tour)
async def create_tour(
    request: CreateTourRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Create a new tour.

    Room types are priced with the vendor's current commission rate.
    """
    tour_service = TourService(db)

    try:
        tour = await tour_service.create_tour(request)
        return _tour_response(tour)

    except ProblemDetailsException:
        # Re-raise Problem Details exceptions as-is
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in tour creation",
            extra={
                "slug": request.slug,
                "tour_name": request.name,
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/get", response_model=Tour)
async def get_tour(
    request: GetTourRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Fetch a tour with its pricing, window and aggregate rating."""
    tour_service = TourService(db)

    try:
        tour = await tour_service.get_tour_by_id_or_raise(request.tour_id)
        return _tour_response(tour)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error fetching tour",
            extra={"tour_id": str(request.tour_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/room-types", response_model=Tour)
async def update_room_types(
    request: UpdateRoomTypesRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Replace a tour's room types and re-price them."""
    tour_service = TourService(db)

    try:
        tour = await tour_service.update_room_types(request.tour_id, request.room_types)
        return _tour_response(tour)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error replacing room types",
            extra={"tour_id": str(request.tour_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/window", response_model=Tour)
async def update_availability_window(
    request: UpdateAvailabilityWindowRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Replace a tour's availability window and blackout days."""
    tour_service = TourService(db)

    try:
        tour = await tour_service.update_availability_window(
            request.tour_id, request.availability_window
        )
        return _tour_response(tour)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error replacing availability window",
            extra={"tour_id": str(request.tour_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/status", response_model=Tour)
async def update_status(
    request: UpdateTourStatusRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Admin approval action: accept, reject, cancel or send back to pending."""
    tour_service = TourService(db)

    try:
        tour = await tour_service.set_status(request)
        return _tour_response(tour)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error changing tour status",
            extra={
                "tour_id": str(request.tour_id),
                "status": request.status.value,
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
