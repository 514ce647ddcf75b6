"""Availability router for tour special days."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import ProblemDetailsException
from ..models.availability import Availability as AvailabilityModel
from ..schemas.availability import (
    Availability,
    AvailabilityList,
    CreateAvailabilityRequest,
    DeleteAvailabilityRequest,
    DeleteAvailabilityResponse,
    DeleteTourAvailabilityRequest,
    Discount,
    GetAvailabilityRequest,
    ListAvailabilityRequest,
)
from ..schemas.tour import RoomType
from ..services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/availability", tags=["availability"])


def _convert_availability_to_schema(availability: AvailabilityModel) -> Availability:
    return Availability(
        id=availability.id,
        tour_id=availability.tour_id,
        dates=availability.days,
        room_types=[RoomType.model_validate(room_type) for room_type in availability.room_types],
        discounts=[Discount.model_validate(discount) for discount in availability.discounts],
        created_at=availability.created_at,
    )


def _list_response(records: list[AvailabilityModel]) -> JSONResponse:
    response_data = AvailabilityList(
        items=[_convert_availability_to_schema(record) for record in records]
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/create", response_model=AvailabilityList)
async def create_availability(
    request: CreateAvailabilityRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Add special days to a tour.

    Every date must fall inside the tour's window and off its blackout days,
    otherwise nothing is stored. One record is created per date.
    """
    availability_service = AvailabilityService(db)

    try:
        records = await availability_service.create_availability(request)
        return _list_response(records)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error creating availability",
            extra={
                "tour_id": str(request.tour_id),
                "date_count": len(request.dates),
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/get", response_model=Availability)
async def get_availability(
    request: GetAvailabilityRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Fetch one availability record of a tour."""
    availability_service = AvailabilityService(db)

    try:
        availability = await availability_service.get_availability_for_tour(
            request.availability_id, request.tour_id
        )
        return JSONResponse(
            status_code=200,
            content=_convert_availability_to_schema(availability).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error fetching availability",
            extra={"availability_id": str(request.availability_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/list", response_model=AvailabilityList)
async def list_availability(
    request: ListAvailabilityRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """List a tour's availability records ordered by date."""
    availability_service = AvailabilityService(db)

    try:
        records = await availability_service.list_availability_for_tour(request.tour_id)
        return _list_response(records)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error listing availability",
            extra={"tour_id": str(request.tour_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/delete", response_model=DeleteAvailabilityResponse)
async def delete_availability(
    request: DeleteAvailabilityRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Remove one availability record."""
    availability_service = AvailabilityService(db)

    try:
        deleted = await availability_service.delete_availability(request.availability_id)
        response_data = DeleteAvailabilityResponse(
            deleted_count=deleted,
            message="Availability record deleted"
        )
        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error deleting availability",
            extra={"availability_id": str(request.availability_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/delete-by-tour", response_model=DeleteAvailabilityResponse)
async def delete_tour_availability(
    request: DeleteTourAvailabilityRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Remove every availability record of a tour."""
    availability_service = AvailabilityService(db)

    try:
        deleted = await availability_service.delete_availability_for_tour(request.tour_id)
        response_data = DeleteAvailabilityResponse(
            deleted_count=deleted,
            message=f"{deleted} availability record(s) deleted"
        )
        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error deleting tour availability",
            extra={"tour_id": str(request.tour_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
