"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return float(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    database_path: Path
    log_level: str
    seed_demo_data: bool

    # Routing between the single-room path and the group search path.
    group_size_threshold: int

    # Combination search budget.
    search_max_combinations: int
    search_max_depth: int
    search_max_rooms_per_assignment: int
    search_max_solutions: int
    search_max_steps: int
    search_time_limit_seconds: float

    # Pricing.
    single_occupant_surcharge: str
    surcharge_room_types: tuple[str, ...]
    price_tie_epsilon: str

    availability_check_workers: int
    synthetic_random_seed: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests derive variants via `replace`."""
    return Settings(
        app_name=_env_str("APP_NAME", "Group Stay Optimizer"),
        app_version=_env_str("APP_VERSION", "1.0.0"),
        database_path=Path(
            _env_str("DATABASE_PATH", str(PROJECT_ROOT / "data" / "booking_optimizer.db"))
        ),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        seed_demo_data=_env_bool("SEED_DEMO_DATA", True),
        group_size_threshold=_env_int("GROUP_SIZE_THRESHOLD", 10),
        search_max_combinations=_env_int("SEARCH_MAX_COMBINATIONS", 10),
        search_max_depth=_env_int("SEARCH_MAX_DEPTH", 15),
        search_max_rooms_per_assignment=_env_int("SEARCH_MAX_ROOMS_PER_ASSIGNMENT", 10),
        search_max_solutions=_env_int("SEARCH_MAX_SOLUTIONS", 10),
        search_max_steps=_env_int("SEARCH_MAX_STEPS", 200_000),
        search_time_limit_seconds=_env_float("SEARCH_TIME_LIMIT_SECONDS", 2.0),
        single_occupant_surcharge=_env_str("SINGLE_OCCUPANT_SURCHARGE", "1.5"),
        surcharge_room_types=tuple(
            item.strip()
            for item in _env_str("SURCHARGE_ROOM_TYPES", "Double Bed,Family Suite").split(",")
            if item.strip()
        ),
        price_tie_epsilon=_env_str("PRICE_TIE_EPSILON", "0.01"),
        availability_check_workers=_env_int("AVAILABILITY_CHECK_WORKERS", 4),
        synthetic_random_seed=_env_int("SYNTHETIC_RANDOM_SEED", 42),
    )
