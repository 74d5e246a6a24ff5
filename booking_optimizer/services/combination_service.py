"""Bounded depth-first enumeration of multi-room party allocations.

The search walks room "slots" in a price-biased order. At each slot it may
place one occupancy split (adults, children) in one or more copies of that
room, or skip the room entirely. Each slot is visited once per branch, so the
same set of room types is never produced in two different orders.

Frames live on an explicit stack instead of the call stack. Children are
pushed in reverse so they pop in natural order: every "use" branch of a slot
first, in ascending (adults, children, count) order, then the "skip" branch.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import cmp_to_key
from typing import Iterator, Optional, Sequence

from booking_optimizer.domain.constraints import SearchBudget, SearchConfig, validate_search_config
from booking_optimizer.domain.models import Combination, Room, RoomAssignment, SearchOutcome
from booking_optimizer.utils.logger import get_logger


logger = get_logger(__name__)

ORDERING_EPSILON = Decimal("0.01")

STOP_EXHAUSTED = "exhausted"
STOP_RESULT_CAP = "result_cap"
STOP_STEP_BUDGET = "step_budget"
STOP_DEADLINE = "deadline"


@dataclass(frozen=True)
class SearchFrame:
    room_index: int
    remaining_adults: int
    remaining_children: int
    partial: Combination
    depth: int


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def _compare_rooms(first: Room, second: Room) -> int:
    first_rate = first.price_per_max_occupant
    second_rate = second.price_per_max_occupant
    if abs(first_rate - second_rate) > ORDERING_EPSILON:
        return -1 if first_rate < second_rate else 1
    return second.max_occupancy - first.max_occupancy


def sort_rooms_for_search(rooms: Sequence[Room]) -> list[Room]:
    """Cheapest rate per bed first; near-ties go to the larger room."""
    candidates = [room for room in rooms if room.max_occupancy > 0]
    return sorted(candidates, key=cmp_to_key(_compare_rooms))


def iter_occupancy_splits(
    room: Room,
    remaining_adults: int,
    remaining_children: int,
) -> Iterator[tuple[int, int]]:
    """Yield every (adults, children) split the room can take right now."""
    for adults in range(room.min_adults, min(remaining_adults, room.max_adults) + 1):
        for children in range(room.min_children, min(remaining_children, room.max_children) + 1):
            if adults + children == 0:
                continue
            if adults + children > room.max_occupancy:
                continue
            yield adults, children


def max_copies(
    room: Room,
    adults: int,
    children: int,
    remaining_adults: int,
    remaining_children: int,
    max_rooms_per_assignment: int,
) -> int:
    """Upper bound on how many copies of one split are worth trying."""
    bounds = [max_rooms_per_assignment]
    if adults > 0:
        bounds.append(_ceil_div(remaining_adults, adults))
    if children > 0:
        bounds.append(_ceil_div(remaining_children, children))
    if room.units_available is not None:
        bounds.append(room.units_available)
    return min(bounds)


def _expand(frame: SearchFrame, room: Room, config: SearchConfig) -> list[SearchFrame]:
    children_frames: list[SearchFrame] = []
    for adults, children in iter_occupancy_splits(
        room, frame.remaining_adults, frame.remaining_children
    ):
        copies = max_copies(
            room,
            adults,
            children,
            frame.remaining_adults,
            frame.remaining_children,
            config.max_rooms_per_assignment,
        )
        for count in range(1, copies + 1):
            adults_used = adults * count
            children_used = children * count
            if adults_used > frame.remaining_adults or children_used > frame.remaining_children:
                continue
            assignment = RoomAssignment(room=room, adults=adults, children=children)
            children_frames.append(
                SearchFrame(
                    room_index=frame.room_index + 1,
                    remaining_adults=frame.remaining_adults - adults_used,
                    remaining_children=frame.remaining_children - children_used,
                    partial=frame.partial + (assignment,) * count,
                    depth=frame.depth + 1,
                )
            )
    children_frames.append(
        SearchFrame(
            room_index=frame.room_index + 1,
            remaining_adults=frame.remaining_adults,
            remaining_children=frame.remaining_children,
            partial=frame.partial,
            depth=frame.depth,
        )
    )
    return children_frames


def search_combinations(
    rooms: Sequence[Room],
    adults: int,
    children: int,
    config: Optional[SearchConfig] = None,
    budget: Optional[SearchBudget] = None,
) -> SearchOutcome:
    """Enumerate combinations that seat exactly `adults` and `children`.

    `rooms` is searched in the order given; callers normally pass the output
    of `sort_rooms_for_search`. The search stops at the first of: result cap,
    step budget, deadline, or an exhausted tree.
    """
    resolved_config = config or SearchConfig()
    validate_search_config(resolved_config)
    current_budget = budget or SearchBudget.from_config(resolved_config)

    found: list[Combination] = []
    if not rooms:
        return SearchOutcome(combinations=found, steps_used=0, stop_reason=STOP_EXHAUSTED)

    stack = [
        SearchFrame(
            room_index=0,
            remaining_adults=adults,
            remaining_children=children,
            partial=(),
            depth=0,
        )
    ]
    steps_used = 0
    stop_reason = STOP_EXHAUSTED

    while stack:
        if current_budget.result_cap_reached:
            stop_reason = STOP_RESULT_CAP
            break
        if current_budget.steps_exhausted:
            stop_reason = STOP_STEP_BUDGET
            break
        if current_budget.deadline_passed():
            stop_reason = STOP_DEADLINE
            break

        frame = stack.pop()
        current_budget = current_budget.spend_step()
        steps_used += 1

        if frame.remaining_adults == 0 and frame.remaining_children == 0:
            found.append(frame.partial)
            current_budget = current_budget.record_combination()
            continue

        if frame.depth > current_budget.max_depth or frame.room_index >= len(rooms):
            continue

        room = rooms[frame.room_index]
        stack.extend(reversed(_expand(frame, room, resolved_config)))

    if not stack and stop_reason == STOP_EXHAUSTED and current_budget.result_cap_reached:
        stop_reason = STOP_RESULT_CAP

    logger.debug(
        "Combination search completed | combinations=%s | steps=%s | stop_reason=%s",
        len(found),
        steps_used,
        stop_reason,
    )
    return SearchOutcome(combinations=found, steps_used=steps_used, stop_reason=stop_reason)


def generate_combinations(
    rooms: Sequence[Room],
    adults: int,
    children: int,
    config: Optional[SearchConfig] = None,
) -> SearchOutcome:
    """Sort the pool for the biased search order, then search it."""
    if not rooms:
        return SearchOutcome()
    return search_combinations(
        sort_rooms_for_search(rooms),
        adults,
        children,
        config=config,
    )
