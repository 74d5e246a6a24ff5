"""Availability checks for candidate rooms over a stay window."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol, Sequence

from booking_optimizer.domain.models import Room, StayWindow
from booking_optimizer.repository.data_repository import DataRepository
from booking_optimizer.utils.logger import get_logger


logger = get_logger(__name__)


class AvailabilityCheckError(Exception):
    """Raised when the availability oracle fails for a room."""

    def __init__(self, room_id: str, message: str) -> None:
        super().__init__(message)
        self.room_id = room_id


class AvailabilityOracle(Protocol):
    def is_available(self, room_id: str, window: StayWindow) -> bool:
        ...


class RepositoryAvailabilityOracle:
    """A room is free when no booking of any status overlaps the window."""

    def __init__(self, repository: DataRepository) -> None:
        self._repository = repository

    def is_available(self, room_id: str, window: StayWindow) -> bool:
        overlapping = self._repository.count_overlapping_bookings(
            room_id=room_id,
            check_in_date=window.check_in,
            check_out_date=window.check_out,
        )
        return overlapping == 0


def _check_one(oracle: AvailabilityOracle, room: Room, window: StayWindow) -> bool:
    try:
        return bool(oracle.is_available(room.room_id, window))
    except Exception as exc:
        raise AvailabilityCheckError(
            room.room_id,
            f"Availability check failed for room {room.room_id}: {exc}",
        ) from exc


def check_rooms_availability(
    rooms: Sequence[Room],
    window: StayWindow,
    oracle: AvailabilityOracle,
    max_workers: Optional[int] = None,
) -> dict[str, bool]:
    """Query the oracle once per room; all queries finish before returning.

    Any failure propagates as `AvailabilityCheckError`. No room is ever
    defaulted to available or unavailable.
    """
    if not rooms:
        return {}

    workers = max(1, min(max_workers or 1, len(rooms)))
    if workers == 1:
        results = [_check_one(oracle, room, window) for room in rooms]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_check_one, oracle, room, window) for room in rooms]
            results = [future.result() for future in futures]

    availability = {room.room_id: result for room, result in zip(rooms, results)}
    logger.debug(
        "Availability checked | rooms=%s | available=%s | check_in=%s | check_out=%s",
        len(rooms),
        sum(1 for value in availability.values() if value),
        window.check_in,
        window.check_out,
    )
    return availability


def filter_available_rooms(
    rooms: Sequence[Room],
    window: StayWindow,
    oracle: AvailabilityOracle,
    max_workers: Optional[int] = None,
) -> list[Room]:
    """Keep only rooms the oracle reports free, preserving input order."""
    availability = check_rooms_availability(rooms, window, oracle, max_workers=max_workers)
    return [room for room in rooms if availability[room.room_id]]
