"""Vendor router for vendor and commission management."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import ProblemDetailsException
from ..models.vendor import Vendor as VendorModel
from ..schemas.vendor import CreateVendorRequest, GetVendorRequest, UpdateCommissionRequest, Vendor
from ..services.vendor_service import VendorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/vendor", tags=["vendor"])


def _convert_vendor_to_schema(vendor: VendorModel) -> Vendor:
    return Vendor(
        id=vendor.id,
        name=vendor.name,
        email=vendor.email,
        commission_rate=None if vendor.commission_rate is None else float(vendor.commission_rate),
    )


@router.post("/create", response_model=Vendor)
async def create_vendor(
    request: CreateVendorRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Register a vendor with its commission rate."""
    vendor_service = VendorService(db)

    try:
        vendor = await vendor_service.create_vendor(request)
        return JSONResponse(
            status_code=200,
            content=_convert_vendor_to_schema(vendor).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in vendor creation",
            extra={"email": request.email, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/get", response_model=Vendor)
async def get_vendor(
    request: GetVendorRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Fetch a vendor by ID."""
    vendor_service = VendorService(db)

    try:
        vendor = await vendor_service.get_vendor_by_id_or_raise(request.vendor_id)
        return JSONResponse(
            status_code=200,
            content=_convert_vendor_to_schema(vendor).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error fetching vendor",
            extra={"vendor_id": str(request.vendor_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/commission", response_model=Vendor)
async def update_commission(
    request: UpdateCommissionRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Change a vendor's commission rate.

    Existing derived prices are not recomputed.
    """
    vendor_service = VendorService(db)

    try:
        vendor = await vendor_service.update_commission_rate(request)
        return JSONResponse(
            status_code=200,
            content=_convert_vendor_to_schema(vendor).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error updating commission rate",
            extra={"vendor_id": str(request.vendor_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
