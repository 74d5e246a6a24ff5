"""Deduplication, pricing, and ranking of candidate room combinations."""

from __future__ import annotations

from decimal import Decimal
from functools import cmp_to_key
from typing import Iterable, Optional, Sequence

from booking_optimizer.domain.constraints import PricingConfig, SearchConfig
from booking_optimizer.domain.models import (
    Combination,
    Party,
    PricedAssignment,
    Solution,
)
from booking_optimizer.services.pricing_service import price_for_config
from booking_optimizer.utils.logger import get_logger


logger = get_logger(__name__)


def combination_key(combination: Combination) -> str:
    """Order-independent identity of a combination's per-room splits."""
    return "|".join(
        sorted(
            f"{assignment.room.room_id}-{assignment.adults}-{assignment.children}"
            for assignment in combination
        )
    )


def deduplicate_combinations(combinations: Iterable[Combination]) -> list[Combination]:
    seen: set[str] = set()
    unique: list[Combination] = []
    for combination in combinations:
        key = combination_key(combination)
        if key in seen:
            continue
        seen.add(key)
        unique.append(combination)
    return unique


def presort_combinations(combinations: Sequence[Combination]) -> list[Combination]:
    """Fewest rooms first, then the cheapest sum of nightly rates."""
    return sorted(
        combinations,
        key=lambda combination: (
            len(combination),
            sum((assignment.room.price_per_night for assignment in combination), Decimal(0)),
        ),
    )


def price_combination(
    combination: Combination,
    party: Party,
    nights: int,
    pricing: Optional[PricingConfig] = None,
) -> Solution:
    resolved_pricing = pricing or PricingConfig()
    priced_rooms = tuple(
        PricedAssignment(
            room=assignment.room,
            adults=assignment.adults,
            children=assignment.children,
            price=price_for_config(
                assignment.room,
                assignment.adults,
                assignment.children,
                nights,
                resolved_pricing,
            ),
        )
        for assignment in combination
    )
    total_price = sum((item.price for item in priced_rooms), Decimal(0))
    return Solution(
        rooms=priced_rooms,
        total_price=total_price,
        total_rooms=len(priced_rooms),
        price_per_person=total_price / party.total_guests,
        nights=nights,
    )


def rank_solutions(
    solutions: Iterable[Solution],
    epsilon: Decimal = Decimal("0.01"),
    limit: Optional[int] = 10,
) -> list[Solution]:
    """Cheapest total first; totals within `epsilon` prefer fewer rooms."""

    def compare(first: Solution, second: Solution) -> int:
        difference = abs(first.total_price - second.total_price)
        if difference < epsilon:
            return first.total_rooms - second.total_rooms
        return -1 if first.total_price < second.total_price else 1

    ranked = sorted(solutions, key=cmp_to_key(compare))
    if limit is not None:
        ranked = ranked[:limit]
    return ranked


def rank_combinations(
    combinations: Iterable[Combination],
    party: Party,
    nights: int,
    config: Optional[SearchConfig] = None,
    pricing: Optional[PricingConfig] = None,
) -> list[Solution]:
    """Dedupe, shortlist, price, and rank raw combinations."""
    resolved_config = config or SearchConfig()
    unique = deduplicate_combinations(combinations)
    shortlisted = presort_combinations(unique)[: resolved_config.max_combinations]
    solutions = [
        price_combination(combination, party, nights, pricing)
        for combination in shortlisted
    ]
    ranked = rank_solutions(
        solutions,
        epsilon=resolved_config.price_tie_epsilon,
        limit=resolved_config.max_solutions,
    )
    logger.debug(
        "Ranking completed | raw_unique=%s | shortlisted=%s | returned=%s",
        len(unique),
        len(shortlisted),
        len(ranked),
    )
    return ranked
