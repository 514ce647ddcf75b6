"""Review service for business logic operations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.review import Review
from ..schemas.review import CreateReviewRequest, ListReviewsRequest, UpdateReviewRequest
from .rating_aggregator import DuplicateReviewError, RatingAggregator
from .tour_service import TourService

logger = logging.getLogger(__name__)


def _require_comment(comment: str) -> str:
    if not comment.strip():
        raise ValidationError(detail="Review comment must not be blank", errors={"comment": "blank"})
    return comment


class ReviewService:
    """Service for review operations; every write keeps the tour rating in step."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)
        self.aggregator = RatingAggregator(db)

    async def create_review(self, request: CreateReviewRequest, user_id: str) -> Review:
        """
        Submit a review and fold it into the tour's aggregate rating.

        The review insert and the tour update commit together.

        Args:
            request: Review creation request
            user_id: Authenticated author

        Returns:
            Created review

        Raises:
            NotFoundError: If tour not found
            DuplicateReviewError: If the user already reviewed the tour
            ValidationError: If the comment is blank
        """
        comment = _require_comment(request.comment)
        tour_id = request.tour_id

        async def operation() -> UUID:
            tour = await self.tour_service.get_tour_with_lock(tour_id)

            existing = await self.get_user_review_for_tour(user_id, tour_id)
            if existing:
                logger.warning(
                    "Duplicate review rejected",
                    extra={"user_id": user_id, "tour_id": str(tour_id), "review_id": str(existing.id)}
                )
                raise DuplicateReviewError(user_id, str(tour_id))

            review = Review(
                user_id=user_id,
                tour_id=tour_id,
                rating=request.rating,
                comment=comment,
            )
            await self.aggregator.on_review_created(review, tour)
            return review.id

        review_id = await self.tour_service.serialized_write(tour_id, operation, "create_review")

        metrics_collector.record_review_submitted()
        logger.info(
            "Review created successfully",
            extra={"review_id": str(review_id), "tour_id": str(tour_id), "rating": request.rating}
        )
        return await self.get_review_by_id_or_raise(review_id)

    async def update_review(self, request: UpdateReviewRequest, user_id: str) -> Review:
        """
        Edit the author's own review; the tour rating is recomputed only when the rating changed.

        Raises:
            NotFoundError: If review not found
            AuthorizationError: If the caller did not write the review
        """
        comment = None if request.comment is None else _require_comment(request.comment)
        review = await self._get_own_review(request.review_id, user_id)
        tour_id = review.tour_id
        review_id = review.id

        async def operation() -> bool:
            current = await self.get_review_by_id_or_raise(review_id)
            old_rating = current.rating
            if request.rating is not None:
                current.rating = request.rating
            if comment is not None:
                current.comment = comment

            summary = await self.aggregator.on_review_updated(current, old_rating)
            await self.db.flush()
            return summary is not None

        recomputed = await self.tour_service.serialized_write(tour_id, operation, "update_review")

        logger.info(
            "Review updated",
            extra={"review_id": str(review_id), "tour_id": str(tour_id), "rating_recomputed": recomputed}
        )
        return await self.get_review_by_id_or_raise(review_id)

    async def delete_review(self, review_id: UUID, user_id: str) -> None:
        """
        Delete the author's own review and recompute the tour rating.

        Raises:
            NotFoundError: If review not found
            AuthorizationError: If the caller did not write the review
        """
        review = await self._get_own_review(review_id, user_id)
        tour_id = review.tour_id

        async def operation() -> None:
            current = await self.get_review_by_id_or_raise(review_id)
            await self.aggregator.on_review_deleted(current)

        await self.tour_service.serialized_write(tour_id, operation, "delete_review")

        metrics_collector.record_review_deleted()
        logger.info(
            "Review deleted",
            extra={"review_id": str(review_id), "tour_id": str(tour_id)}
        )

    async def list_reviews(self, request: ListReviewsRequest) -> list[Review]:
        """List reviews, newest first, filtered by tour and/or vendor."""
        stmt = select(Review)
        if request.tour_id is not None:
            stmt = stmt.where(Review.tour_id == request.tour_id)
        if request.vendor_id is not None:
            stmt = stmt.where(Review.vendor_id == request.vendor_id)
        stmt = stmt.order_by(Review.created_at.desc(), Review.id)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_review_by_id(self, review_id: UUID) -> Optional[Review]:
        stmt = (
            select(Review)
            .where(Review.id == review_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_review_for_tour(self, user_id: str, tour_id: UUID) -> Optional[Review]:
        stmt = select(Review).where(Review.user_id == user_id, Review.tour_id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_review_by_id_or_raise(self, review_id: UUID) -> Review:
        """
        Get review by ID or raise NotFoundError.

        Raises:
            NotFoundError: If review not found
        """
        review = await self.get_review_by_id(review_id)
        if not review:
            logger.warning(
                "Review not found",
                extra={"review_id": str(review_id)}
            )
            raise NotFoundError(
                resource_type="review",
                resource_id=str(review_id)
            )
        return review

    async def _get_own_review(self, review_id: UUID, user_id: str) -> Review:
        review = await self.get_review_by_id_or_raise(review_id)
        if review.user_id != user_id:
            logger.warning(
                "Review modification denied",
                extra={"review_id": str(review_id), "user_id": user_id}
            )
            raise AuthorizationError(detail="Only the author can modify this review")
        return review
