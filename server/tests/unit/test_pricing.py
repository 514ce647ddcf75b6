"""Unit tests for the commission pricing engine."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from marketplace.core.exceptions import ValidationError
from marketplace.models.tour import TourRoomType
from marketplace.services.pricing import derive_price, price_room_types, resolve_commission_rate


def test_derive_price_adds_commission():
    assert derive_price(100, 15) == 115


def test_derive_price_zero_commission_keeps_net():
    assert derive_price(4999, 0) == 4999


def test_derive_price_rounds_half_up_to_minor_unit():
    # 10 * 12.5% = 1.25 -> 11.25 -> 11; 10 * 15% = 1.5 -> 11.5 -> 12; 30 * 15% = 4.5 -> 34.5 -> 35
    assert derive_price(10, Decimal("12.5")) == 11
    assert derive_price(10, 15) == 12
    assert derive_price(30, 15) == 35


def test_derive_price_accepts_float_rate():
    assert derive_price(10000, 7.5) == 10750


def test_derive_price_rejects_negative_net_price():
    with pytest.raises(ValidationError) as exc_info:
        derive_price(-1, 15)

    assert exc_info.value.status_code == 400


def test_derive_price_rejects_missing_net_price():
    with pytest.raises(ValidationError):
        derive_price(None, 15)


def test_resolve_commission_rate_uses_vendor_rate():
    vendor = SimpleNamespace(commission_rate=Decimal("20.00"))
    assert resolve_commission_rate(vendor) == Decimal("20.00")


def test_resolve_commission_rate_defaults_without_vendor():
    assert resolve_commission_rate(None) == Decimal("15")


def test_resolve_commission_rate_defaults_when_rate_unset():
    vendor = SimpleNamespace(commission_rate=None)
    assert resolve_commission_rate(vendor) == Decimal("15")


def test_resolve_commission_rate_honours_explicit_zero():
    vendor = SimpleNamespace(commission_rate=Decimal("0"))
    assert resolve_commission_rate(vendor) == Decimal("0")


def test_price_room_types_overwrites_every_derived_price():
    room_types = [
        TourRoomType(name="Double", net_price=10000, derived_price=1),
        TourRoomType(name="Single", net_price=6000),
    ]

    price_room_types(room_types, Decimal("15"))

    assert [room_type.derived_price for room_type in room_types] == [11500, 6900]


def test_price_room_types_is_all_or_nothing():
    room_types = [
        TourRoomType(name="Double", net_price=10000),
        TourRoomType(name="Broken", net_price=-5),
    ]

    with pytest.raises(ValidationError):
        price_room_types(room_types, Decimal("15"))

    assert room_types[0].derived_price is None
