"""Stay pricing for a single room assignment."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from booking_optimizer.domain.constraints import PricingConfig
from booking_optimizer.domain.models import Room, to_decimal


DEFAULT_PRICING = PricingConfig()


def calculate_price(
    room: Room,
    adults: int,
    children: int,
    nights: int,
    *,
    surcharge_multiplier: Optional[Decimal] = None,
    surcharge_room_types: Optional[Iterable[str]] = None,
) -> Decimal:
    """Return the total stay price for one room.

    A lone adult in a double or family room pays the surcharge multiplier on
    the nightly rate. Children never change the price. No rounding is applied.
    """
    del children
    multiplier = (
        to_decimal(surcharge_multiplier)
        if surcharge_multiplier is not None
        else DEFAULT_PRICING.surcharge_multiplier
    )
    room_types = (
        frozenset(surcharge_room_types)
        if surcharge_room_types is not None
        else frozenset(DEFAULT_PRICING.surcharge_room_types)
    )

    base_price = room.price_per_night
    if adults == 1 and room.room_type in room_types:
        base_price = base_price * multiplier
    return base_price * nights


def price_for_config(
    room: Room,
    adults: int,
    children: int,
    nights: int,
    config: PricingConfig,
) -> Decimal:
    return calculate_price(
        room,
        adults,
        children,
        nights,
        surcharge_multiplier=config.surcharge_multiplier,
        surcharge_room_types=config.surcharge_room_types,
    )
