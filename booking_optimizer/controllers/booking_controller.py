"""HTTP controller layer for booking optimization and availability checks."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator

from booking_optimizer.controllers.dependencies import get_optimization_service
from booking_optimizer.domain.models import (
    GroupOptimizationResult,
    PricedAssignment,
    Recommendation,
    Room,
    Solution,
)
from booking_optimizer.services.availability_service import AvailabilityCheckError
from booking_optimizer.services.optimization_service import (
    BookingOptimizationService,
    OptimizationValidationError,
    RoomPoolError,
)
from booking_optimizer.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["booking"])

_CENT = Decimal("0.01")


def _money(value: Decimal) -> float:
    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


class StayRequest(BaseModel):
    check_in_date: date
    check_out_date: date

    @model_validator(mode="after")
    def validate_stay_order(self) -> "StayRequest":
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self


class OptimizeBookingRequest(StayRequest):
    """Input DTO validated before entering service layer."""

    adults: int = Field(ge=1)
    children: int = Field(default=0, ge=0)
    city: Optional[str] = Field(default=None, max_length=120)


class CheckAvailabilityRequest(StayRequest):
    room_id: str = Field(min_length=1)


class HotelResponse(BaseModel):
    hotel_id: str
    name: str
    city: str
    address: str


class RoomResponse(BaseModel):
    room_id: str
    room_type: str
    price_per_night: float = Field(ge=0.0)
    min_adults: int = Field(ge=0)
    max_adults: int = Field(ge=0)
    min_children: int = Field(ge=0)
    max_children: int = Field(ge=0)
    amenities: list[str]
    hotel: Optional[HotelResponse] = None

    @classmethod
    def from_room(cls, room: Room) -> "RoomResponse":
        hotel = None
        if room.hotel is not None:
            hotel = HotelResponse(
                hotel_id=room.hotel.hotel_id,
                name=room.hotel.name,
                city=room.hotel.city,
                address=room.hotel.address,
            )
        return cls(
            room_id=room.room_id,
            room_type=room.room_type,
            price_per_night=_money(room.price_per_night),
            min_adults=room.min_adults,
            max_adults=room.max_adults,
            min_children=room.min_children,
            max_children=room.max_children,
            amenities=list(room.amenities),
            hotel=hotel,
        )


class RoomAllocationResponse(BaseModel):
    room: RoomResponse
    adults: int = Field(ge=0)
    children: int = Field(ge=0)
    price: float = Field(ge=0.0)

    @classmethod
    def from_assignment(cls, assignment: PricedAssignment) -> "RoomAllocationResponse":
        return cls(
            room=RoomResponse.from_room(assignment.room),
            adults=assignment.adults,
            children=assignment.children,
            price=_money(assignment.price),
        )


class SolutionResponse(BaseModel):
    rooms: list[RoomAllocationResponse]
    total_price: float = Field(ge=0.0)
    total_rooms: int = Field(ge=1)
    price_per_person: float = Field(ge=0.0)
    nights: int = Field(ge=1)

    @classmethod
    def from_solution(cls, solution: Solution) -> "SolutionResponse":
        return cls(
            rooms=[RoomAllocationResponse.from_assignment(item) for item in solution.rooms],
            total_price=_money(solution.total_price),
            total_rooms=solution.total_rooms,
            price_per_person=_money(solution.price_per_person),
            nights=solution.nights,
        )


class RecommendationResponse(BaseModel):
    room: RoomResponse
    is_available: bool
    total_price: float = Field(ge=0.0)
    price_per_person: float = Field(ge=0.0)
    nights: int = Field(ge=1)
    adults: int = Field(ge=1)
    children: int = Field(ge=0)

    @classmethod
    def from_recommendation(cls, item: Recommendation) -> "RecommendationResponse":
        return cls(
            room=RoomResponse.from_room(item.room),
            is_available=item.is_available,
            total_price=_money(item.total_price),
            price_per_person=_money(item.price_per_person),
            nights=item.nights,
            adults=item.adults,
            children=item.children,
        )


class GroupOptimizationResponse(BaseModel):
    success: bool = True
    solutions: list[SolutionResponse]
    total_guests: int
    nights: int
    message: str


class IndividualRecommendationResponse(BaseModel):
    success: bool = True
    recommendations: list[RecommendationResponse]
    total_guests: int
    nights: int


class CheckAvailabilityResponse(BaseModel):
    success: bool = True
    is_available: bool


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


async def _validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    del request
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return _failure(status.HTTP_400_BAD_REQUEST, str(message))


def register_exception_handlers(app: FastAPI) -> None:
    """Report body validation failures as `{success: false, message}`."""
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)


@router.post(
    "/optimize_booking",
    response_model=GroupOptimizationResponse | IndividualRecommendationResponse,
    status_code=status.HTTP_200_OK,
)
def optimize_booking(
    payload: OptimizeBookingRequest,
    service: BookingOptimizationService = Depends(get_optimization_service),
):
    """Recommend single rooms for small parties, room combinations for groups."""
    try:
        result = service.optimize(
            adults=payload.adults,
            children=payload.children,
            check_in=payload.check_in_date,
            check_out=payload.check_out_date,
            city=payload.city,
        )
    except OptimizationValidationError as exc:
        return _failure(status.HTTP_400_BAD_REQUEST, str(exc))
    except (AvailabilityCheckError, RoomPoolError) as exc:
        logger.warning("Optimization collaborator failure | error=%s", exc)
        return _failure(status.HTTP_502_BAD_GATEWAY, str(exc))
    except Exception:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected optimization failure")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to optimize booking")

    if isinstance(result, GroupOptimizationResult):
        return GroupOptimizationResponse(
            solutions=[SolutionResponse.from_solution(item) for item in result.solutions],
            total_guests=result.total_guests,
            nights=result.nights,
            message=result.message,
        )
    return IndividualRecommendationResponse(
        recommendations=[
            RecommendationResponse.from_recommendation(item) for item in result.recommendations
        ],
        total_guests=result.total_guests,
        nights=result.nights,
    )


@router.post(
    "/check_availability",
    response_model=CheckAvailabilityResponse,
    status_code=status.HTTP_200_OK,
)
def check_availability(
    payload: CheckAvailabilityRequest,
    service: BookingOptimizationService = Depends(get_optimization_service),
):
    """Report whether one room is free for the requested stay."""
    try:
        is_available = service.check_availability(
            room_id=payload.room_id,
            check_in=payload.check_in_date,
            check_out=payload.check_out_date,
        )
    except OptimizationValidationError as exc:
        return _failure(status.HTTP_400_BAD_REQUEST, str(exc))
    except AvailabilityCheckError as exc:
        logger.warning("Availability check failure | room_id=%s | error=%s", exc.room_id, exc)
        return _failure(status.HTTP_502_BAD_GATEWAY, str(exc))

    if is_available is None:
        return _failure(status.HTTP_404_NOT_FOUND, f"Room {payload.room_id} not found")
    return CheckAvailabilityResponse(is_available=is_available)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    return {"status": "ok"}
