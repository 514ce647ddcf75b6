"""Review router; every write keeps the reviewed tour's rating current."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import RequiredAuth
from ..core.exceptions import ProblemDetailsException
from ..schemas.review import (
    CreateReviewRequest,
    DeleteReviewRequest,
    ListReviewsRequest,
    Review,
    ReviewList,
    UpdateReviewRequest,
)
from ..services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/review", tags=["review"])


@router.post("/create", response_model=Review)
async def create_review(
    request: CreateReviewRequest,
    current_user: dict = RequiredAuth,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Review a tour as the authenticated user.

    One review per user and tour; a second attempt is a 409 conflict.
    """
    review_service = ReviewService(db)

    try:
        review = await review_service.create_review(request, current_user["user_id"])
        return JSONResponse(
            status_code=200,
            content=Review.model_validate(review).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error creating review",
            extra={
                "tour_id": str(request.tour_id),
                "user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/update", response_model=Review)
async def update_review(
    request: UpdateReviewRequest,
    current_user: dict = RequiredAuth,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Edit your own review."""
    review_service = ReviewService(db)

    try:
        review = await review_service.update_review(request, current_user["user_id"])
        return JSONResponse(
            status_code=200,
            content=Review.model_validate(review).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error updating review",
            extra={"review_id": str(request.review_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/delete")
async def delete_review(
    request: DeleteReviewRequest,
    current_user: dict = RequiredAuth,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Delete your own review."""
    review_service = ReviewService(db)

    try:
        await review_service.delete_review(request.review_id, current_user["user_id"])
        return JSONResponse(
            status_code=200,
            content={"review_id": str(request.review_id), "deleted": True}
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error deleting review",
            extra={"review_id": str(request.review_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.post("/list", response_model=ReviewList)
async def list_reviews(
    request: ListReviewsRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """List reviews by tour and/or vendor, newest first."""
    review_service = ReviewService(db)

    try:
        reviews = await review_service.list_reviews(request)
        response_data = ReviewList(items=[Review.model_validate(review) for review in reviews])
        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error listing reviews",
            extra={"error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
