from __future__ import annotations

import inspect
from dataclasses import replace

from fastapi import FastAPI
from fastapi.testclient import TestClient

from booking_optimizer.controllers.booking_controller import (
    check_availability,
    optimize_booking,
    register_exception_handlers,
    router,
)
from booking_optimizer.domain.models import StayWindow
from booking_optimizer.repository.data_repository import DataRepository
from booking_optimizer.services.optimization_service import BookingOptimizationService
from booking_optimizer.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str, **overrides):
    values = {"database_path": tmp_path / filename, "seed_demo_data": False}
    values.update(overrides)
    return replace(get_settings(), **values)


class _ExplodingOracle:
    def is_available(self, room_id: str, window: StayWindow) -> bool:
        raise RuntimeError("availability backend down")


def _build_client(tmp_path, filename: str, oracle=None) -> tuple[TestClient, dict[str, str]]:
    settings = _build_test_settings(tmp_path, filename)
    repository = DataRepository(settings)
    repository.initialize_database()
    hotel_id = repository.create_hotel("Saigon Riverside", "Ho Chi Minh City", "5 Ton Duc Thang")
    room_ids = {
        "double": repository.create_room(
            hotel_id, "Double Bed", 100, max_adults=2, max_children=1, amenities=["Free WiFi"]
        ),
        "family": repository.create_room(
            hotel_id, "Family Suite", 120, min_adults=2, max_adults=4, max_children=3
        ),
    }
    service = BookingOptimizationService(repository=repository, settings=settings, oracle=oracle)

    app = FastAPI()
    app.include_router(router)
    register_exception_handlers(app)
    app.state.optimization_service = service
    return TestClient(app), room_ids


def test_optimize_booking_group_response(tmp_path):
    client, _ = _build_client(tmp_path, "group_endpoint.db")

    response = client.post(
        "/optimize_booking",
        json={
            "adults": 8,
            "children": 4,
            "check_in_date": "2026-06-01",
            "check_out_date": "2026-06-03",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["total_guests"] == 12
    assert body["nights"] == 2
    assert body["message"] == f"Found {len(body['solutions'])} optimal room combination(s) for 12 guests"
    assert body["solutions"]
    best = body["solutions"][0]
    assert set(best) == {"rooms", "total_price", "total_rooms", "price_per_person", "nights"}
    assert sum(item["adults"] for item in best["rooms"]) == 8
    assert sum(item["children"] for item in best["rooms"]) == 4
    assert best["total_rooms"] == len(best["rooms"])
    assert abs(sum(item["price"] for item in best["rooms"]) - best["total_price"]) < 0.01


def test_optimize_booking_individual_response(tmp_path):
    client, room_ids = _build_client(tmp_path, "individual_endpoint.db")

    response = client.post(
        "/optimize_booking",
        json={
            "adults": 1,
            "check_in_date": "2026-06-01",
            "check_out_date": "2026-06-03",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["total_guests"] == 1
    assert [item["room"]["room_id"] for item in body["recommendations"]] == [room_ids["double"]]
    recommendation = body["recommendations"][0]
    assert recommendation["total_price"] == 300.0
    assert recommendation["price_per_person"] == 300.0
    assert recommendation["is_available"] is True
    assert recommendation["children"] == 0
    assert recommendation["room"]["amenities"] == ["Free WiFi"]
    assert recommendation["room"]["hotel"]["city"] == "Ho Chi Minh City"


def test_missing_adults_is_rejected(tmp_path):
    client, _ = _build_client(tmp_path, "missing_adults.db")

    response = client.post(
        "/optimize_booking",
        json={"check_in_date": "2026-06-01", "check_out_date": "2026-06-03"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "adults" in body["message"]


def test_zero_adults_is_rejected(tmp_path):
    client, _ = _build_client(tmp_path, "zero_adults.db")

    response = client.post(
        "/optimize_booking",
        json={"adults": 0, "check_in_date": "2026-06-01", "check_out_date": "2026-06-03"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_checkout_before_checkin_is_rejected(tmp_path):
    client, _ = _build_client(tmp_path, "bad_dates.db")

    response = client.post(
        "/optimize_booking",
        json={"adults": 2, "check_in_date": "2026-06-03", "check_out_date": "2026-06-01"},
    )

    assert response.status_code == 400
    assert "check_out_date" in response.json()["message"]


def test_collaborator_failure_returns_bad_gateway(tmp_path):
    client, _ = _build_client(tmp_path, "oracle_down.db", oracle=_ExplodingOracle())

    response = client.post(
        "/optimize_booking",
        json={"adults": 10, "check_in_date": "2026-06-01", "check_out_date": "2026-06-03"},
    )

    assert response.status_code == 502
    body = response.json()
    assert body["success"] is False
    assert "availability" in body["message"].lower()


def test_check_availability_endpoint(tmp_path):
    client, room_ids = _build_client(tmp_path, "check_endpoint.db")
    service = client.app.state.optimization_service
    payload = {"check_in_date": "2026-06-01", "check_out_date": "2026-06-03"}

    free = client.post("/check_availability", json={**payload, "room_id": room_ids["double"]})
    assert free.status_code == 200
    assert free.json() == {"success": True, "is_available": True}

    service._repository.create_booking(room_ids["double"], "2026-06-02", "2026-06-05")
    booked = client.post("/check_availability", json={**payload, "room_id": room_ids["double"]})
    assert booked.json()["is_available"] is False

    missing = client.post("/check_availability", json={**payload, "room_id": "unknown"})
    assert missing.status_code == 404
    assert missing.json()["success"] is False


def test_app_factory_seeds_demo_inventory(tmp_path):
    from app import create_app

    settings = _build_test_settings(tmp_path, "factory.db", seed_demo_data=True)
    app = create_app(settings)

    with TestClient(app) as client:
        health = client.get("/health")
        assert health.json() == {"status": "ok"}

        response = client.post(
            "/optimize_booking",
            json={
                "adults": 2,
                "check_in_date": "2031-01-10",
                "check_out_date": "2031-01-12",
                "city": "hanoi",
            },
        )

    assert response.status_code == 200
    recommendations = response.json()["recommendations"]
    assert len(recommendations) == 3
    assert all(item["is_available"] for item in recommendations)
    assert {item["room"]["hotel"]["city"] for item in recommendations} == {"Hanoi"}


def test_service_bound_handlers_run_in_threadpool():
    # The optimizer is synchronous; plain handlers keep it off the event loop.
    assert not inspect.iscoroutinefunction(optimize_booking)
    assert not inspect.iscoroutinefunction(check_availability)
