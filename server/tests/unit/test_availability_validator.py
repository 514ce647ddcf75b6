"""Unit tests for the availability-conflict validator."""

from datetime import date, datetime

import pytest

from marketplace.models.tour import Tour, TourBlackoutDay, TourStatus
from marketplace.services.availability_validator import (
    REAPPROVAL_POLICY,
    InvalidDateRangeError,
    ReapprovalPolicy,
    ReapprovalTrigger,
    find_invalid_dates,
    flag_for_reapproval,
    validate_dates,
)


def make_tour(status: str = TourStatus.PENDING.value) -> Tour:
    return Tour(
        name="Fjords",
        slug="fjords",
        available_from=date(2024, 6, 1),
        available_to=date(2024, 6, 30),
        blackout_days=[TourBlackoutDay(day=date(2024, 6, 15))],
        status=status,
    )


def test_window_bounds_are_inclusive():
    tour = make_tour()
    assert find_invalid_dates(tour, [date(2024, 6, 1), date(2024, 6, 30)]) == []


def test_blackout_and_out_of_window_dates_are_reported():
    tour = make_tour()

    invalid = find_invalid_dates(
        tour, [date(2024, 6, 10), date(2024, 6, 15), date(2024, 7, 1)]
    )

    assert invalid == [date(2024, 6, 15), date(2024, 7, 1)]


def test_time_of_day_is_ignored():
    tour = make_tour()

    invalid = find_invalid_dates(tour, [datetime(2024, 6, 15, 18, 30), datetime(2024, 6, 16, 9, 0)])

    assert invalid == [date(2024, 6, 15)]


def test_invalid_dates_are_sorted_and_unique():
    tour = make_tour()

    invalid = find_invalid_dates(tour, [date(2024, 7, 2), date(2024, 5, 31), date(2024, 7, 2)])

    assert invalid == [date(2024, 5, 31), date(2024, 7, 2)]


def test_validate_dates_rejects_whole_batch():
    tour = make_tour()

    with pytest.raises(InvalidDateRangeError) as exc_info:
        validate_dates(tour, [date(2024, 6, 10), date(2024, 6, 15), date(2024, 7, 1)])

    error = exc_info.value
    assert error.status_code == 409
    assert error.problem_details["code"] == "INVALID_DATE_RANGE"
    assert error.problem_details["offending_dates"] == ["2024-06-15", "2024-07-01"]
    assert error.offending_dates == [date(2024, 6, 15), date(2024, 7, 1)]


def test_validate_dates_returns_unique_ordered_days():
    tour = make_tour()

    days = validate_dates(tour, [date(2024, 6, 20), date(2024, 6, 2), date(2024, 6, 20)])

    assert days == [date(2024, 6, 2), date(2024, 6, 20)]


def test_reapproval_policy_resets_status():
    assert REAPPROVAL_POLICY is ReapprovalPolicy.NOTE_AND_PENDING


@pytest.mark.parametrize("trigger", list(ReapprovalTrigger))
def test_accepted_tour_is_flagged(trigger):
    tour = make_tour(status=TourStatus.ACCEPTED.value)

    assert flag_for_reapproval(tour, trigger) is True
    assert tour.note == trigger.value
    assert tour.status == TourStatus.PENDING.value


@pytest.mark.parametrize("status", ["pending", "rejected", "cancelled"])
def test_non_accepted_tour_is_left_alone(status):
    tour = make_tour(status=status)

    assert flag_for_reapproval(tour, ReapprovalTrigger.ADDED) is False
    assert tour.note is None
    assert tour.status == status
