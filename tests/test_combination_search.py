from __future__ import annotations

import time

from booking_optimizer.domain.constraints import SearchBudget, SearchConfig
from booking_optimizer.domain.models import Room
from booking_optimizer.services.combination_service import (
    generate_combinations,
    search_combinations,
    sort_rooms_for_search,
)


def _room(room_id: str, price, max_adults: int, max_children: int = 0, **overrides) -> Room:
    values = {
        "room_id": room_id,
        "room_type": "Double Bed",
        "price_per_night": price,
        "min_adults": 1,
        "max_adults": max_adults,
        "min_children": 0,
        "max_children": max_children,
    }
    values.update(overrides)
    return Room(**values)


def _splits(combination) -> list[tuple[str, int, int]]:
    return [(item.room.room_id, item.adults, item.children) for item in combination]


def _assert_valid(combination, adults: int, children: int) -> None:
    assert sum(item.adults for item in combination) == adults
    assert sum(item.children for item in combination) == children
    for item in combination:
        room = item.room
        assert room.min_adults <= item.adults <= room.max_adults
        assert room.min_children <= item.children <= room.max_children
        assert item.adults + item.children <= room.max_occupancy


def test_sort_prefers_cheap_beds_then_larger_rooms():
    pair = _room("pair", 100, max_adults=2)
    trio = _room("trio", 150, max_adults=3)
    solo = _room("solo", 40, max_adults=1)
    empty = _room("empty", 10, max_adults=0, min_adults=0)

    ordered = sort_rooms_for_search([pair, trio, solo, empty])

    assert [room.room_id for room in ordered] == ["solo", "trio", "pair"]


def test_single_room_type_is_reused_in_every_uniform_split():
    outcome = generate_combinations([_room("a", 100, max_adults=2)], adults=4, children=0)

    assert [_splits(item) for item in outcome.combinations] == [
        [("a", 1, 0)] * 4,
        [("a", 2, 0)] * 2,
    ]
    assert outcome.stop_reason == "exhausted"


def test_every_combination_covers_party_exactly_within_bounds():
    rooms = [
        _room("double", 70, max_adults=2, max_children=1),
        _room("family", 120, max_adults=4, max_children=3, min_adults=2, room_type="Family Suite"),
        _room("single", 45, max_adults=1, room_type="Single Bed"),
    ]

    outcome = generate_combinations(rooms, adults=8, children=3)

    assert outcome.combinations
    for combination in outcome.combinations:
        _assert_valid(combination, adults=8, children=3)


def test_party_without_children_is_searchable():
    outcome = generate_combinations([_room("a", 50, max_adults=3)], adults=6, children=0)

    assert outcome.combinations
    for combination in outcome.combinations:
        _assert_valid(combination, adults=6, children=0)


def test_empty_pool_yields_nothing():
    outcome = generate_combinations([], adults=10, children=2)

    assert outcome.combinations == []
    assert outcome.steps_used == 0


def test_result_cap_limits_combinations():
    rooms = [
        _room(f"single-{index}", 50, max_adults=1, room_type="Single Bed")
        for index in range(12)
    ]

    outcome = generate_combinations(rooms, adults=10, children=0)

    assert len(outcome.combinations) == 10
    assert outcome.stop_reason == "result_cap"
    for combination in outcome.combinations:
        _assert_valid(combination, adults=10, children=0)


def test_custom_result_cap():
    rooms = [_room(f"single-{index}", 50, max_adults=1) for index in range(6)]

    outcome = generate_combinations(
        rooms,
        adults=5,
        children=0,
        config=SearchConfig(max_combinations=3),
    )

    assert len(outcome.combinations) == 3


def test_units_available_limits_copies():
    limited = _room("a", 100, max_adults=2, units_available=2)

    outcome = generate_combinations([limited], adults=4, children=0)

    assert [_splits(item) for item in outcome.combinations] == [[("a", 2, 0)] * 2]


def test_room_without_units_is_never_used():
    sold_out = _room("a", 100, max_adults=2, units_available=0)

    assert generate_combinations([sold_out], adults=2, children=0).combinations == []


def test_rooms_per_assignment_cap():
    outcome = generate_combinations(
        [_room("a", 100, max_adults=1)],
        adults=12,
        children=0,
    )

    assert outcome.combinations == []


def test_depth_limit_still_accepts_single_slot_solutions():
    outcome = generate_combinations(
        [_room("a", 100, max_adults=2)],
        adults=2,
        children=0,
        config=SearchConfig(max_depth=0),
    )

    assert [_splits(item) for item in outcome.combinations] == [
        [("a", 1, 0)] * 2,
        [("a", 2, 0)],
    ]


def test_step_budget_stops_search():
    outcome = generate_combinations(
        [_room("a", 100, max_adults=2)],
        adults=4,
        children=0,
        config=SearchConfig(max_steps=1),
    )

    assert outcome.combinations == []
    assert outcome.steps_used == 1
    assert outcome.stop_reason == "step_budget"


def test_expired_deadline_stops_search():
    budget = SearchBudget(
        remaining_combinations=10,
        max_depth=15,
        remaining_steps=1000,
        deadline=time.monotonic() - 1,
    )

    outcome = search_combinations(
        [_room("a", 100, max_adults=2)],
        adults=2,
        children=0,
        budget=budget,
    )

    assert outcome.combinations == []
    assert outcome.stop_reason == "deadline"


def test_search_is_deterministic():
    rooms = [
        _room("double", 70, max_adults=2, max_children=1),
        _room("luxury", 150, max_adults=3, max_children=2, room_type="Luxury Room"),
        _room("family", 120, max_adults=4, max_children=3, min_adults=2),
    ]

    first = generate_combinations(rooms, adults=9, children=3)
    second = generate_combinations(list(rooms), adults=9, children=3)

    assert first == second
