"""Domain-level validation rules and budgets for the combination search."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional


class SearchConfigError(ValueError):
    """Raised when search or pricing configuration is out of bounds."""


@dataclass(frozen=True)
class SearchConfig:
    max_combinations: int = 10
    max_depth: int = 15
    max_rooms_per_assignment: int = 10
    max_solutions: int = 10
    max_steps: int = 200_000
    time_limit_seconds: Optional[float] = 2.0
    price_tie_epsilon: Decimal = Decimal("0.01")


@dataclass(frozen=True)
class PricingConfig:
    surcharge_multiplier: Decimal = Decimal("1.5")
    surcharge_room_types: tuple[str, ...] = ("Double Bed", "Family Suite")


@dataclass(frozen=True)
class SearchBudget:
    """Remaining allowance for one search run.

    Values are never mutated in place; `spend_step` and `record_combination`
    return a new budget.
    """

    remaining_combinations: int
    max_depth: int
    remaining_steps: int
    deadline: Optional[float] = None

    @classmethod
    def from_config(cls, config: SearchConfig) -> "SearchBudget":
        deadline = None
        if config.time_limit_seconds is not None:
            deadline = time.monotonic() + config.time_limit_seconds
        return cls(
            remaining_combinations=config.max_combinations,
            max_depth=config.max_depth,
            remaining_steps=config.max_steps,
            deadline=deadline,
        )

    @property
    def result_cap_reached(self) -> bool:
        return self.remaining_combinations <= 0

    @property
    def steps_exhausted(self) -> bool:
        return self.remaining_steps <= 0

    def deadline_passed(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def spend_step(self) -> "SearchBudget":
        return replace(self, remaining_steps=self.remaining_steps - 1)

    def record_combination(self) -> "SearchBudget":
        return replace(self, remaining_combinations=self.remaining_combinations - 1)


def validate_search_config(config: SearchConfig) -> None:
    if config.max_combinations <= 0:
        raise SearchConfigError("max_combinations must be > 0")
    if config.max_depth < 0:
        raise SearchConfigError("max_depth must be >= 0")
    if config.max_rooms_per_assignment <= 0:
        raise SearchConfigError("max_rooms_per_assignment must be > 0")
    if config.max_solutions <= 0:
        raise SearchConfigError("max_solutions must be > 0")
    if config.max_steps <= 0:
        raise SearchConfigError("max_steps must be > 0")
    if config.time_limit_seconds is not None and config.time_limit_seconds <= 0:
        raise SearchConfigError("time_limit_seconds must be > 0 when set")
    if config.price_tie_epsilon <= 0:
        raise SearchConfigError("price_tie_epsilon must be > 0")


def validate_pricing_config(config: PricingConfig) -> None:
    if config.surcharge_multiplier < 1:
        raise SearchConfigError("surcharge_multiplier must be >= 1")
