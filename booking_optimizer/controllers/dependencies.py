"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from booking_optimizer.services.optimization_service import BookingOptimizationService
from booking_optimizer.utils.config import get_settings


def get_optimization_service(request: Request) -> BookingOptimizationService:
    service = getattr(request.app.state, "optimization_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        if repository is not None:
            service = BookingOptimizationService(
                repository=repository,
                settings=get_settings(),
            )
            request.app.state.optimization_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Optimization service is not initialized",
        )
    return service
