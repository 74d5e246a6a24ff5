"""Room-booking optimization: single-room recommendations or group combinations."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from booking_optimizer.domain.constraints import (
    PricingConfig,
    SearchConfig,
    validate_pricing_config,
    validate_search_config,
)
from booking_optimizer.domain.models import (
    GroupOptimizationResult,
    IndividualRecommendationResult,
    Party,
    Recommendation,
    Room,
    StayWindow,
)
from booking_optimizer.repository.data_repository import DataRepository
from booking_optimizer.services.availability_service import (
    AvailabilityOracle,
    RepositoryAvailabilityOracle,
    check_rooms_availability,
    filter_available_rooms,
)
from booking_optimizer.services.combination_service import generate_combinations
from booking_optimizer.services.pricing_service import price_for_config
from booking_optimizer.services.ranking_service import rank_combinations
from booking_optimizer.utils.config import Settings, get_settings
from booking_optimizer.utils.logger import get_logger


logger = get_logger(__name__)

OptimizationOutcome = Union[GroupOptimizationResult, IndividualRecommendationResult]


class OptimizationError(Exception):
    """Base exception for booking optimization failures."""


class OptimizationValidationError(OptimizationError):
    """Raised when the party or stay window is invalid."""


class RoomPoolError(OptimizationError):
    """Raised when the candidate room pool cannot be loaded."""


def _coerce_date(value: Union[date, str], field_name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise OptimizationValidationError(f"{field_name} must follow YYYY-MM-DD format") from exc


def validate_request(
    adults: Optional[int],
    children: Optional[int],
    check_in: Union[date, str],
    check_out: Union[date, str],
) -> tuple[Party, StayWindow]:
    if adults is None or adults < 1:
        raise OptimizationValidationError("At least 1 adult is required.")
    resolved_children = children or 0
    if resolved_children < 0:
        raise OptimizationValidationError("children must be >= 0")
    window = StayWindow(
        check_in=_coerce_date(check_in, "check_in_date"),
        check_out=_coerce_date(check_out, "check_out_date"),
    )
    if window.nights < 1:
        raise OptimizationValidationError("check_out_date must be after check_in_date")
    return Party(adults=adults, children=resolved_children), window


def build_search_config(settings: Settings) -> SearchConfig:
    config = SearchConfig(
        max_combinations=settings.search_max_combinations,
        max_depth=settings.search_max_depth,
        max_rooms_per_assignment=settings.search_max_rooms_per_assignment,
        max_solutions=settings.search_max_solutions,
        max_steps=settings.search_max_steps,
        time_limit_seconds=settings.search_time_limit_seconds,
        price_tie_epsilon=Decimal(settings.price_tie_epsilon),
    )
    validate_search_config(config)
    return config


def build_pricing_config(settings: Settings) -> PricingConfig:
    config = PricingConfig(
        surcharge_multiplier=Decimal(settings.single_occupant_surcharge),
        surcharge_room_types=settings.surcharge_room_types,
    )
    validate_pricing_config(config)
    return config


class BookingOptimizationService:
    """Business logic orchestration for room recommendations and group allocation."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        oracle: Optional[AvailabilityOracle] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._oracle = oracle or RepositoryAvailabilityOracle(self._repository)
        self._search_config = build_search_config(self._settings)
        self._pricing_config = build_pricing_config(self._settings)

    @property
    def oracle(self) -> AvailabilityOracle:
        return self._oracle

    def optimize(
        self,
        *,
        adults: Optional[int],
        children: Optional[int] = 0,
        check_in: Union[date, str],
        check_out: Union[date, str],
        city: Optional[str] = None,
    ) -> OptimizationOutcome:
        party, window = validate_request(adults, children, check_in, check_out)
        rooms = self._load_room_pool(city)

        if party.total_guests >= self._settings.group_size_threshold:
            return self._optimize_group(party, window, rooms)
        return self._recommend_individual(party, window, rooms)

    def _load_room_pool(self, city: Optional[str]) -> list[Room]:
        try:
            return self._repository.list_rooms(only_available=True, city=city)
        except Exception as exc:
            logger.exception("Room pool lookup failed | city=%s", city)
            raise RoomPoolError(f"Failed to load rooms: {exc}") from exc

    def _optimize_group(
        self,
        party: Party,
        window: StayWindow,
        rooms: list[Room],
    ) -> GroupOptimizationResult:
        nights = window.nights
        available_rooms = filter_available_rooms(
            rooms,
            window,
            self._oracle,
            max_workers=self._settings.availability_check_workers,
        )
        if not available_rooms:
            logger.info(
                "Group optimization skipped; no available rooms | pool=%s | guests=%s",
                len(rooms),
                party.total_guests,
            )
            return GroupOptimizationResult(
                solutions=[],
                total_guests=party.total_guests,
                nights=nights,
                message=self._group_message(0, party.total_guests),
            )

        outcome = generate_combinations(
            available_rooms,
            party.adults,
            party.children,
            config=self._search_config,
        )
        solutions = rank_combinations(
            outcome.combinations,
            party,
            nights,
            config=self._search_config,
            pricing=self._pricing_config,
        )
        logger.info(
            (
                "Group optimization completed | guests=%s | nights=%s | available_rooms=%s | "
                "combinations=%s | solutions=%s | steps=%s | stop_reason=%s"
            ),
            party.total_guests,
            nights,
            len(available_rooms),
            len(outcome.combinations),
            len(solutions),
            outcome.steps_used,
            outcome.stop_reason,
        )
        return GroupOptimizationResult(
            solutions=solutions,
            total_guests=party.total_guests,
            nights=nights,
            message=self._group_message(len(solutions), party.total_guests),
        )

    def _recommend_individual(
        self,
        party: Party,
        window: StayWindow,
        rooms: list[Room],
    ) -> IndividualRecommendationResult:
        nights = window.nights
        suitable_rooms = [room for room in rooms if room.fits(party.adults, party.children)]
        availability = check_rooms_availability(
            suitable_rooms,
            window,
            self._oracle,
            max_workers=self._settings.availability_check_workers,
        )

        recommendations: list[Recommendation] = []
        for room in suitable_rooms:
            total_price = price_for_config(
                room,
                party.adults,
                party.children,
                nights,
                self._pricing_config,
            )
            recommendations.append(
                Recommendation(
                    room=room,
                    is_available=availability[room.room_id],
                    total_price=total_price,
                    price_per_person=total_price / party.total_guests,
                    nights=nights,
                    adults=party.adults,
                    children=party.children,
                )
            )
        recommendations.sort(key=lambda item: item.price_per_person)

        logger.info(
            "Individual recommendations completed | guests=%s | nights=%s | suitable=%s | available=%s",
            party.total_guests,
            nights,
            len(suitable_rooms),
            sum(1 for item in recommendations if item.is_available),
        )
        return IndividualRecommendationResult(
            recommendations=recommendations,
            total_guests=party.total_guests,
            nights=nights,
        )

    @staticmethod
    def _group_message(solution_count: int, total_guests: int) -> str:
        return f"Found {solution_count} optimal room combination(s) for {total_guests} guests"

    def check_availability(
        self,
        room_id: str,
        check_in: Union[date, str],
        check_out: Union[date, str],
    ) -> Optional[bool]:
        """Return availability for one room, or None if the room is unknown."""
        window = StayWindow(
            check_in=_coerce_date(check_in, "check_in_date"),
            check_out=_coerce_date(check_out, "check_out_date"),
        )
        if window.nights < 1:
            raise OptimizationValidationError("check_out_date must be after check_in_date")
        room = self._repository.get_room(room_id)
        if room is None:
            return None
        return check_rooms_availability([room], window, self._oracle)[room.room_id]
