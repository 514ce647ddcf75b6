"""Property-based tests for pricing, rating and date-validation invariants."""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from hypothesis import given
from hypothesis import strategies as st

from marketplace.models.tour import Tour, TourBlackoutDay
from marketplace.services.availability_validator import find_invalid_dates
from marketplace.services.pricing import derive_price
from marketplace.services.rating_aggregator import summarize_ratings

# Strategies for generating test data
net_prices = st.integers(min_value=0, max_value=10_000_000)
commission_rates = st.decimals(min_value=0, max_value=100, places=2)
ratings = st.lists(st.integers(min_value=1, max_value=5), min_size=1, max_size=200)
days = st.dates(min_value=date(2024, 1, 1), max_value=date(2024, 12, 31))


@given(net_price=net_prices, rate=commission_rates)
def test_derived_price_matches_formula(net_price, rate):
    """The formula holds exactly once rounded half-up to a whole minor unit.

    The rounding moves the result by at most half a minor unit.
    """
    exact = Decimal(net_price) + Decimal(net_price) * rate / 100
    derived = derive_price(net_price, rate)

    assert derived == int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    assert abs(Decimal(derived) - exact) <= Decimal("0.5")
    assert derived >= net_price


@given(net_price=net_prices, percent=st.integers(min_value=0, max_value=100))
def test_whole_percent_on_whole_hundreds_is_exact(net_price, percent):
    net = net_price * 100
    assert derive_price(net, percent) == net + net * percent // 100


@given(rates=st.tuples(commission_rates, commission_rates), net_price=net_prices)
def test_higher_commission_never_lowers_price(rates, net_price):
    low, high = sorted(rates)
    assert derive_price(net_price, low) <= derive_price(net_price, high)


@given(values=ratings)
def test_average_is_rounded_mean(values):
    summary = summarize_ratings(len(values), sum(values))

    expected = (Decimal(sum(values)) / len(values)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    assert summary.count == len(values)
    assert summary.average == float(expected)
    assert 1.0 <= summary.average <= 5.0


def test_no_reviews_means_zero():
    summary = summarize_ratings(0, 0)
    assert (summary.average, summary.count) == (0.0, 0)


@given(
    start=days,
    length=st.integers(min_value=0, max_value=60),
    blackout=st.sets(days, max_size=10),
    candidates=st.lists(days, max_size=30),
)
def test_invalid_dates_are_exactly_the_disallowed_ones(start, length, blackout, candidates):
    end = start + timedelta(days=length)
    tour = Tour(
        available_from=start,
        available_to=end,
        blackout_days=[TourBlackoutDay(day=day) for day in blackout],
    )

    invalid = find_invalid_dates(tour, candidates)

    assert invalid == sorted(set(invalid))
    for day in candidates:
        allowed = start <= day <= end and day not in blackout
        assert (day in invalid) is not allowed
