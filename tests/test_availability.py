from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from booking_optimizer.domain.models import Room, StayWindow
from booking_optimizer.repository.data_repository import DataRepository
from booking_optimizer.services.availability_service import (
    AvailabilityCheckError,
    RepositoryAvailabilityOracle,
    check_rooms_availability,
    filter_available_rooms,
)
from booking_optimizer.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str):
    base = get_settings()
    return replace(
        base,
        database_path=tmp_path / filename,
        seed_demo_data=False,
    )


def _build_repository(tmp_path, filename: str) -> tuple[DataRepository, str]:
    repository = DataRepository(_build_test_settings(tmp_path, filename))
    repository.initialize_database()
    hotel_id = repository.create_hotel("Harbour View", "Da Nang")
    return repository, hotel_id


class _StaticOracle:
    def __init__(self, unavailable: set[str]) -> None:
        self._unavailable = unavailable
        self.calls: list[str] = []

    def is_available(self, room_id: str, window: StayWindow) -> bool:
        self.calls.append(room_id)
        return room_id not in self._unavailable


class _FailingOracle:
    def is_available(self, room_id: str, window: StayWindow) -> bool:
        raise ConnectionError("booking store unreachable")


def _room(room_id: str) -> Room:
    return Room(room_id=room_id, room_type="Double Bed", price_per_night=80)


WINDOW = StayWindow(check_in=date(2026, 3, 12), check_out=date(2026, 3, 14))


def test_overlapping_booking_blocks_room(tmp_path):
    repository, hotel_id = _build_repository(tmp_path, "overlap.db")
    room_id = repository.create_room(hotel_id, "Double Bed", 80)
    repository.create_booking(room_id, "2026-03-10", "2026-03-12", status="confirmed")
    oracle = RepositoryAvailabilityOracle(repository)

    # Interval bounds are inclusive: a checkout on the requested check-in day overlaps.
    assert oracle.is_available(room_id, WINDOW) is False
    assert oracle.is_available(
        room_id,
        StayWindow(check_in=date(2026, 3, 13), check_out=date(2026, 3, 15)),
    ) is True


def test_any_overlapping_booking_blocks_regardless_of_status(tmp_path):
    repository, hotel_id = _build_repository(tmp_path, "cancelled.db")
    room_id = repository.create_room(hotel_id, "Double Bed", 80)
    repository.create_booking(room_id, "2026-03-12", "2026-03-14", status="cancelled")

    assert RepositoryAvailabilityOracle(repository).is_available(room_id, WINDOW) is False


def test_booking_on_other_room_does_not_block(tmp_path):
    repository, hotel_id = _build_repository(tmp_path, "other_room.db")
    free_room = repository.create_room(hotel_id, "Double Bed", 80)
    booked_room = repository.create_room(hotel_id, "Double Bed", 80)
    repository.create_booking(booked_room, "2026-03-12", "2026-03-14")

    oracle = RepositoryAvailabilityOracle(repository)
    assert oracle.is_available(free_room, WINDOW) is True
    assert oracle.is_available(booked_room, WINDOW) is False


def test_filter_keeps_input_order_and_checks_each_room_once():
    rooms = [_room("a"), _room("b"), _room("c"), _room("d")]
    oracle = _StaticOracle(unavailable={"b"})

    available = filter_available_rooms(rooms, WINDOW, oracle, max_workers=3)

    assert [room.room_id for room in available] == ["a", "c", "d"]
    assert sorted(oracle.calls) == ["a", "b", "c", "d"]


def test_check_rooms_availability_returns_map():
    availability = check_rooms_availability(
        [_room("a"), _room("b")],
        WINDOW,
        _StaticOracle(unavailable={"a"}),
    )

    assert availability == {"a": False, "b": True}


def test_empty_pool_skips_oracle():
    oracle = _StaticOracle(unavailable=set())

    assert filter_available_rooms([], WINDOW, oracle) == []
    assert oracle.calls == []


@pytest.mark.parametrize("workers", [1, 4])
def test_oracle_failure_propagates(workers):
    with pytest.raises(AvailabilityCheckError) as exc_info:
        filter_available_rooms([_room("a"), _room("b")], WINDOW, _FailingOracle(), max_workers=workers)

    assert exc_info.value.room_id in {"a", "b"}
    assert isinstance(exc_info.value.__cause__, ConnectionError)
