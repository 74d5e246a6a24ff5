#!/usr/bin/env python3
"""Validate local optimizer environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date, timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from booking_optimizer.domain.models import GroupOptimizationResult
from booking_optimizer.repository.data_repository import DataRepository
from booking_optimizer.services.optimization_service import BookingOptimizationService
from booking_optimizer.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="stay-optimizer-env-")

    # CHECK 1 — Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2 — Required packages importable
    package_names = ["fastapi", "uvicorn", "pydantic", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_names:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        temp_db_path = Path(temp_dir) / "optimizer_validation.db"
        validation_settings = replace(get_settings(), database_path=temp_db_path)
        repository = DataRepository(validation_settings)

        # CHECK 3 — Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4 — Demo inventory seeding (3 hotels x 4 room types)
        try:
            repository.seed_demo_data()
            room_count = repository.count_rooms()
            if room_count != 12:
                raise RuntimeError(f"expected 12 rooms, got {room_count}")
            ok, line = _print_result("Demo inventory: 12 rooms", True)
        except Exception as exc:
            ok, line = _print_result("Demo inventory", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5 — Group optimization smoke run
        try:
            service = BookingOptimizationService(
                repository=repository,
                settings=validation_settings,
            )
            check_in = date.today() + timedelta(days=60)
            result = service.optimize(
                adults=8,
                children=4,
                check_in=check_in,
                check_out=check_in + timedelta(days=2),
            )
            if not isinstance(result, GroupOptimizationResult):
                raise RuntimeError("12 guests should use the group combination path")
            if not result.solutions:
                raise RuntimeError("no room combinations found for demo inventory")
            best = result.solutions[0]
            ok, line = _print_result(
                "Group optimization",
                True,
                f": {len(result.solutions)} solutions, best={best.total_price} in {best.total_rooms} rooms",
            )
        except Exception as exc:
            ok, line = _print_result("Group optimization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Group Stay Optimizer Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
