"""
Availability-conflict validator.

Checks candidate availability dates against a tour's inclusive window and its
blackout days, and flags accepted tours for re-approval when their special
days change.
"""

import logging
from collections.abc import Iterable
from datetime import date, datetime
from enum import Enum

from ..core.exceptions import ConflictError
from ..core.observability import metrics_collector
from ..models.tour import Tour, TourStatus

logger = logging.getLogger(__name__)


class ReapprovalPolicy(str, Enum):
    """What happens to an accepted tour whose availability changed."""
    NOTE_ONLY = "note_only"
    NOTE_AND_PENDING = "note_and_pending"


# Applied identically on create, single delete and delete-all
REAPPROVAL_POLICY = ReapprovalPolicy.NOTE_AND_PENDING


class ReapprovalTrigger(str, Enum):
    """Availability change that fired the re-approval flag; the value is the note."""
    ADDED = "new special days added"
    REMOVED = "special days removed"
    ALL_REMOVED = "all special days removed"


class InvalidDateRangeError(ConflictError):
    """Some availability dates fall outside the tour window or on a blackout day."""

    def __init__(self, tour_id: str, offending_dates: list[date]):
        super().__init__(
            detail=(
                f"{len(offending_dates)} date(s) fall outside the tour's availability "
                "window or on a blackout day"
            ),
            conflicting_resource={"tour_id": tour_id}
        )
        self.offending_dates = offending_dates
        self.problem_details.update({
            "code": "INVALID_DATE_RANGE",
            "retryable": False,
            "offending_dates": [day.isoformat() for day in offending_dates]
        })


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def find_invalid_dates(tour: Tour, candidates: Iterable[date | datetime]) -> list[date]:
    """Sorted, de-duplicated candidates outside the window or on a blackout day."""
    blackout = tour.blackout_dates
    invalid = {
        day
        for day in map(_as_date, candidates)
        if day < tour.available_from or day > tour.available_to or day in blackout
    }
    return sorted(invalid)


def validate_dates(tour: Tour, candidates: Iterable[date | datetime]) -> list[date]:
    """
    Check a whole batch of availability dates; any bad date rejects all of them.

    Returns:
        The unique candidate dates in ascending order

    Raises:
        InvalidDateRangeError: Listing every offending date
    """
    days = sorted({_as_date(candidate) for candidate in candidates})
    offending = find_invalid_dates(tour, days)
    if offending:
        metrics_collector.record_availability_rejected()
        logger.warning(
            "Availability dates rejected",
            extra={
                "tour_id": str(tour.id),
                "offending_dates": [day.isoformat() for day in offending],
                "candidate_count": len(days)
            }
        )
        raise InvalidDateRangeError(str(tour.id), offending)
    return days


def flag_for_reapproval(tour: Tour, trigger: ReapprovalTrigger) -> bool:
    """
    Mark an accepted tour as needing another review.

    Returns:
        True if the tour was flagged, False if it was not accepted
    """
    if tour.status != TourStatus.ACCEPTED.value:
        return False

    tour.note = trigger.value
    if REAPPROVAL_POLICY is ReapprovalPolicy.NOTE_AND_PENDING:
        tour.status = TourStatus.PENDING.value

    metrics_collector.record_tour_flagged(trigger.name.lower())
    logger.info(
        "Tour flagged for re-approval",
        extra={
            "tour_id": str(tour.id),
            "trigger": trigger.name.lower(),
            "policy": REAPPROVAL_POLICY.value,
            "status": tour.status
        }
    )
    return True
