"""
Rating aggregator.

Keeps ``Tour.rating_average`` and ``Tour.rating_count`` equal to the mean and
count of the tour's reviews. The aggregate is always recomputed from the
review table inside the caller's transaction rather than adjusted
incrementally, so it cannot drift. Callers are expected to hold the tour's
write lock (see ``TourService.serialized_write``).
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError
from ..core.observability import metrics_collector
from ..models.review import Review
from ..models.tour import Tour
from .tour_service import TourService

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class RatingSummary:
    """Aggregate rating of a tour."""

    average: float
    count: int


def summarize_ratings(count: int, total: int) -> RatingSummary:
    """Mean of ``count`` ratings summing to ``total``, rounded half-up to one decimal."""
    if count == 0:
        return RatingSummary(average=0.0, count=0)
    mean = Decimal(total) / Decimal(count)
    return RatingSummary(
        average=float(mean.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)),
        count=count,
    )


class DuplicateReviewError(ConflictError):
    """A user tried to review the same tour twice."""

    def __init__(self, user_id: str, tour_id: str):
        super().__init__(
            detail="you have already reviewed this tour",
            conflicting_resource={"user_id": user_id, "tour_id": tour_id}
        )
        self.problem_details.update({
            "code": "DUPLICATE_REVIEW",
            "retryable": False
        })


class RatingAggregator:
    """Recompute a tour's aggregate rating when its reviews change."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)

    async def recompute(self, tour: Tour) -> RatingSummary:
        """Recompute and assign the tour's rating fields from its current review set."""
        stmt = select(
            func.count(Review.id),
            func.coalesce(func.sum(Review.rating), 0),
        ).where(Review.tour_id == tour.id)
        count, total = (await self.db.execute(stmt)).one()

        summary = summarize_ratings(int(count), int(total))
        tour.rating_average = summary.average
        tour.rating_count = summary.count
        return summary

    async def on_review_created(self, review: Review, tour: Tour) -> RatingSummary:
        """
        Insert a new review and fold it into the tour's rating.

        Raises:
            DuplicateReviewError: If the (user, tour) unique constraint rejects the insert
        """
        # a failed flush rolls back and expires the tour, so keep the ids
        tour_id = str(tour.id)
        user_id = review.user_id

        review.vendor_id = tour.vendor_id
        self.db.add(review)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise DuplicateReviewError(user_id, tour_id) from e

        summary = await self.recompute(tour)
        metrics_collector.record_rating_recomputed("created")
        logger.info(
            "Tour rating recomputed after review creation",
            extra={"tour_id": str(tour.id), "average": summary.average, "count": summary.count}
        )
        return summary

    async def on_review_updated(self, review: Review, old_rating: int) -> RatingSummary | None:
        """
        Recompute the tour rating if the review's rating changed.

        Returns:
            New summary, or None when the rating did not change

        Raises:
            NotFoundError: If the review's tour no longer exists
        """
        if review.rating == old_rating:
            return None

        tour = await self.tour_service.get_tour_with_lock(review.tour_id)
        await self.db.flush()
        summary = await self.recompute(tour)
        metrics_collector.record_rating_recomputed("updated")
        logger.info(
            "Tour rating recomputed after review update",
            extra={
                "tour_id": str(tour.id),
                "old_rating": old_rating,
                "new_rating": review.rating,
                "average": summary.average,
            }
        )
        return summary

    async def on_review_deleted(self, review: Review) -> RatingSummary:
        """
        Delete the review and recompute over the remaining set.

        Raises:
            NotFoundError: If the review's tour no longer exists
        """
        tour = await self.tour_service.get_tour_with_lock(review.tour_id)
        await self.db.delete(review)
        await self.db.flush()
        summary = await self.recompute(tour)
        metrics_collector.record_rating_recomputed("deleted")
        logger.info(
            "Tour rating recomputed after review deletion",
            extra={"tour_id": str(tour.id), "average": summary.average, "count": summary.count}
        )
        return summary
