"""Domain models for group room allocation and pricing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Union


def to_decimal(value: Union[int, float, str, Decimal]) -> Decimal:
    """Convert a numeric input to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class HotelSummary:
    hotel_id: str
    name: str
    city: str
    address: str = ""


@dataclass(frozen=True)
class Room:
    room_id: str
    room_type: str
    price_per_night: Decimal
    min_adults: int = 1
    max_adults: int = 2
    min_children: int = 0
    max_children: int = 2
    is_available: bool = True
    hotel: Optional[HotelSummary] = None
    # None means the room type has unlimited units.
    units_available: Optional[int] = None
    amenities: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "price_per_night", to_decimal(self.price_per_night))

    @property
    def max_occupancy(self) -> int:
        return self.max_adults + self.max_children

    @property
    def price_per_max_occupant(self) -> Decimal:
        return self.price_per_night / self.max_occupancy

    def fits(self, adults: int, children: int) -> bool:
        """Return True if the whole party fits this room on its own."""
        return (
            self.max_occupancy >= adults + children
            and self.min_adults <= adults <= self.max_adults
            and self.min_children <= children <= self.max_children
        )


@dataclass(frozen=True)
class Party:
    adults: int
    children: int = 0

    @property
    def total_guests(self) -> int:
        return self.adults + self.children


@dataclass(frozen=True)
class StayWindow:
    check_in: date
    check_out: date

    @property
    def nights(self) -> int:
        seconds = (self.check_out - self.check_in).total_seconds()
        return math.ceil(seconds / 86400)


@dataclass(frozen=True)
class RoomAssignment:
    room: Room
    adults: int
    children: int

    @property
    def guests(self) -> int:
        return self.adults + self.children


Combination = tuple[RoomAssignment, ...]


@dataclass(frozen=True)
class PricedAssignment:
    room: Room
    adults: int
    children: int
    price: Decimal


@dataclass(frozen=True)
class Solution:
    rooms: tuple[PricedAssignment, ...]
    total_price: Decimal
    total_rooms: int
    price_per_person: Decimal
    nights: int


@dataclass(frozen=True)
class Recommendation:
    room: Room
    is_available: bool
    total_price: Decimal
    price_per_person: Decimal
    nights: int
    adults: int
    children: int


@dataclass(frozen=True)
class GroupOptimizationResult:
    solutions: list[Solution]
    total_guests: int
    nights: int
    message: str


@dataclass(frozen=True)
class IndividualRecommendationResult:
    recommendations: list[Recommendation]
    total_guests: int
    nights: int


@dataclass(frozen=True)
class SearchOutcome:
    combinations: list[Combination] = field(default_factory=list)
    steps_used: int = 0
    stop_reason: str = "exhausted"
