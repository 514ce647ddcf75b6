"""Unit tests for review service and rating aggregation."""

from uuid import uuid4

import pytest

from marketplace.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from marketplace.models.review import Review
from marketplace.schemas.review import (
    CreateReviewRequest,
    ListReviewsRequest,
    UpdateReviewRequest,
)
from marketplace.services.rating_aggregator import DuplicateReviewError, RatingAggregator
from marketplace.services.review_service import ReviewService
from marketplace.services.tour_service import TourService


async def submit(session, tour_id, user_id, rating, comment="Great trip"):
    return await ReviewService(session).create_review(
        CreateReviewRequest(tour_id=tour_id, rating=rating, comment=comment),
        user_id,
    )


async def ratings_of(session, tour_id):
    tour = await TourService(session).get_tour_by_id_or_raise(tour_id)
    return tour.rating_average, tour.rating_count


@pytest.mark.asyncio
async def test_average_of_three_reviews(test_session, sample_tour):
    tour_id = sample_tour.id

    for user_id, rating in [("alice", 5), ("bob", 4), ("carol", 3)]:
        await submit(test_session, tour_id, user_id, rating)

    assert await ratings_of(test_session, tour_id) == (4.0, 3)


@pytest.mark.asyncio
async def test_average_rounds_half_up(test_session, sample_tour):
    tour_id = sample_tour.id

    # mean 1.25 rounds to 1.3
    for user_id, rating in [("a", 1), ("b", 1), ("c", 1), ("d", 2)]:
        await submit(test_session, tour_id, user_id, rating)

    assert await ratings_of(test_session, tour_id) == (1.3, 4)


@pytest.mark.asyncio
async def test_review_copies_tour_vendor(test_session, sample_tour, sample_vendor):
    review = await submit(test_session, sample_tour.id, "alice", 5)

    assert review.vendor_id == sample_vendor.id
    assert review.user_id == "alice"


@pytest.mark.asyncio
async def test_duplicate_review_is_rejected(test_session, sample_tour):
    """A second review by the same user fails and leaves ratings untouched."""
    tour_id = sample_tour.id
    await submit(test_session, tour_id, "alice", 5)

    with pytest.raises(ConflictError) as exc_info:
        await submit(test_session, tour_id, "alice", 1)

    assert isinstance(exc_info.value, DuplicateReviewError)
    assert exc_info.value.problem_details["code"] == "DUPLICATE_REVIEW"
    assert await ratings_of(test_session, tour_id) == (5.0, 1)


@pytest.mark.asyncio
async def test_unique_constraint_backs_duplicate_check(test_session, sample_tour):
    """Bypassing the pre-check still hits the (user, tour) constraint."""
    tour_id = sample_tour.id
    await submit(test_session, tour_id, "alice", 5)

    tour = await TourService(test_session).get_tour_by_id_or_raise(tour_id)
    with pytest.raises(DuplicateReviewError):
        await RatingAggregator(test_session).on_review_created(
            Review(user_id="alice", tour_id=tour_id, rating=1, comment="Again"),
            tour,
        )
    await test_session.rollback()

    assert await ratings_of(test_session, tour_id) == (5.0, 1)


@pytest.mark.asyncio
async def test_constraint_conflict_surfaces_as_duplicate_review(test_session, sample_tour, monkeypatch):
    """A duplicate committed after the pre-check still fails with a 409, not a 500."""
    tour_id = sample_tour.id
    await submit(test_session, tour_id, "alice", 5)

    async def no_existing_review(self, user_id, tour_id):
        return None

    monkeypatch.setattr(ReviewService, "get_user_review_for_tour", no_existing_review)

    with pytest.raises(DuplicateReviewError) as exc_info:
        await submit(test_session, tour_id, "alice", 1)

    assert exc_info.value.status_code == 409
    assert exc_info.value.problem_details["code"] == "DUPLICATE_REVIEW"
    assert exc_info.value.problem_details["conflicting_resource"] == {
        "user_id": "alice",
        "tour_id": str(tour_id),
    }
    assert await ratings_of(test_session, tour_id) == (5.0, 1)


@pytest.mark.asyncio
async def test_review_for_unknown_tour(test_session):
    with pytest.raises(NotFoundError):
        await submit(test_session, uuid4(), "alice", 5)


@pytest.mark.asyncio
async def test_blank_comment_is_rejected(test_session, sample_tour):
    with pytest.raises(ValidationError):
        await submit(test_session, sample_tour.id, "alice", 5, comment="   ")


@pytest.mark.asyncio
async def test_update_rating_recomputes(test_session, sample_tour):
    tour_id = sample_tour.id
    review = await submit(test_session, tour_id, "alice", 5)
    await submit(test_session, tour_id, "bob", 3)

    updated = await ReviewService(test_session).update_review(
        UpdateReviewRequest(review_id=review.id, rating=1), "alice"
    )

    assert updated.rating == 1
    assert await ratings_of(test_session, tour_id) == (2.0, 2)


@pytest.mark.asyncio
async def test_update_comment_only_keeps_ratings(test_session, sample_tour):
    tour_id = sample_tour.id
    review = await submit(test_session, tour_id, "alice", 4)

    updated = await ReviewService(test_session).update_review(
        UpdateReviewRequest(review_id=review.id, comment="Even better in hindsight"), "alice"
    )

    assert updated.comment == "Even better in hindsight"
    assert updated.rating == 4
    assert await ratings_of(test_session, tour_id) == (4.0, 1)


@pytest.mark.asyncio
async def test_only_author_can_update(test_session, sample_tour):
    review = await submit(test_session, sample_tour.id, "alice", 4)

    with pytest.raises(AuthorizationError):
        await ReviewService(test_session).update_review(
            UpdateReviewRequest(review_id=review.id, rating=1), "mallory"
        )


@pytest.mark.asyncio
async def test_deleting_only_review_resets_ratings(test_session, sample_tour):
    tour_id = sample_tour.id
    review = await submit(test_session, tour_id, "alice", 4)

    await ReviewService(test_session).delete_review(review.id, "alice")

    assert await ratings_of(test_session, tour_id) == (0.0, 0)


@pytest.mark.asyncio
async def test_delete_recomputes_over_remaining(test_session, sample_tour):
    tour_id = sample_tour.id
    review = await submit(test_session, tour_id, "alice", 1)
    await submit(test_session, tour_id, "bob", 4)
    await submit(test_session, tour_id, "carol", 5)

    await ReviewService(test_session).delete_review(review.id, "alice")

    assert await ratings_of(test_session, tour_id) == (4.5, 2)


@pytest.mark.asyncio
async def test_only_author_can_delete(test_session, sample_tour):
    review = await submit(test_session, sample_tour.id, "alice", 4)

    with pytest.raises(AuthorizationError):
        await ReviewService(test_session).delete_review(review.id, "mallory")


@pytest.mark.asyncio
async def test_delete_unknown_review(test_session):
    with pytest.raises(NotFoundError):
        await ReviewService(test_session).delete_review(uuid4(), "alice")


@pytest.mark.asyncio
async def test_list_reviews_by_tour_and_vendor(test_session, sample_tour, sample_vendor):
    await submit(test_session, sample_tour.id, "alice", 5)
    await submit(test_session, sample_tour.id, "bob", 3)
    service = ReviewService(test_session)

    by_tour = await service.list_reviews(ListReviewsRequest(tour_id=sample_tour.id))
    by_vendor = await service.list_reviews(ListReviewsRequest(vendor_id=sample_vendor.id))
    other = await service.list_reviews(ListReviewsRequest(tour_id=uuid4()))

    assert {review.user_id for review in by_tour} == {"alice", "bob"}
    assert {review.user_id for review in by_vendor} == {"alice", "bob"}
    assert other == []
