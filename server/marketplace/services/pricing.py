"""
Commission pricing engine.

Customer-facing prices are the vendor's net price plus the vendor's
commission percentage. Prices are integer minor currency units; the markup is
computed in Decimal and rounded half-up to a whole minor unit.
"""

import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Protocol

from ..core.config import settings
from ..core.exceptions import ValidationError
from ..models.vendor import Vendor

logger = logging.getLogger(__name__)

MINOR_UNIT = Decimal("1")


class PricedRoomType(Protocol):
    """Anything carrying a net price and a derived price (tour or availability room type)."""

    name: str
    net_price: int
    derived_price: Optional[int]


def derive_price(net_price: Optional[int], commission_rate: Decimal | float | int) -> int:
    """
    Return ``net_price + net_price * commission_rate / 100`` in minor units.

    The exact product is rounded half-up to a whole minor unit, so
    ``derive_price(10, 15)`` is 12 rather than 11.5.

    Raises:
        ValidationError: If the net price is missing or negative
    """
    if net_price is None:
        raise ValidationError(detail="Net price is required", errors={"net_price": "missing"})
    if net_price < 0:
        raise ValidationError(
            detail=f"Net price must be non-negative, got {net_price}",
            errors={"net_price": net_price},
        )

    net = Decimal(net_price)
    rate = Decimal(str(commission_rate))
    derived = net + net * rate / Decimal(100)
    return int(derived.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP))


def resolve_commission_rate(vendor: Optional[Vendor]) -> Decimal:
    """Vendor's current commission rate, or the platform default when unknown."""
    if vendor is None or vendor.commission_rate is None:
        return Decimal(str(settings.default_commission_rate))
    return Decimal(str(vendor.commission_rate))


def price_room_types(room_types: Iterable[PricedRoomType], commission_rate: Decimal) -> None:
    """
    Overwrite every room type's derived price in place.

    All net prices are checked before any derived price is written, so a bad
    entry leaves the whole document untouched.
    """
    room_types = list(room_types)
    for room_type in room_types:
        if room_type.net_price is None or room_type.net_price < 0:
            raise ValidationError(
                detail=f"Room type '{room_type.name}' has an invalid net price",
                errors={"room_type": room_type.name, "net_price": room_type.net_price},
            )

    for room_type in room_types:
        room_type.derived_price = derive_price(room_type.net_price, commission_rate)

    logger.debug(
        "Room types priced",
        extra={"room_type_count": len(room_types), "commission_rate": str(commission_rate)}
    )
