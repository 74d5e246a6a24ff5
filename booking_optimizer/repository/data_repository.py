"""Repository layer responsible for all database access."""

from __future__ import annotations

import json
import random
import sqlite3
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional, Union
from uuid import uuid4

from booking_optimizer.domain.models import HotelSummary, Room, to_decimal
from booking_optimizer.utils.config import Settings, get_settings
from booking_optimizer.utils.logger import get_logger


logger = get_logger(__name__)

_ROOM_COLUMNS = """
    r.id,
    r.room_type,
    r.price_per_night,
    r.min_adults,
    r.max_adults,
    r.min_children,
    r.max_children,
    r.is_available,
    r.units_available,
    r.amenities,
    h.id AS hotel_id,
    h.name AS hotel_name,
    h.city AS hotel_city,
    h.address AS hotel_address
"""


def _iso(value: Union[date, str]) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return value


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Hotels (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        city TEXT NOT NULL,
                        address TEXT NOT NULL DEFAULT '',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Rooms (
                        id TEXT PRIMARY KEY,
                        hotel_id TEXT NOT NULL,
                        room_type TEXT NOT NULL,
                        price_per_night TEXT NOT NULL,
                        min_adults INTEGER NOT NULL DEFAULT 1 CHECK (min_adults >= 0),
                        max_adults INTEGER NOT NULL DEFAULT 2 CHECK (max_adults >= 0),
                        min_children INTEGER NOT NULL DEFAULT 0 CHECK (min_children >= 0),
                        max_children INTEGER NOT NULL DEFAULT 2 CHECK (max_children >= 0),
                        is_available INTEGER NOT NULL DEFAULT 1 CHECK (is_available IN (0,1)),
                        units_available INTEGER,
                        amenities TEXT NOT NULL DEFAULT '[]',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (hotel_id) REFERENCES Hotels(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Bookings (
                        id TEXT PRIMARY KEY,
                        room_id TEXT NOT NULL,
                        check_in_date TEXT NOT NULL,
                        check_out_date TEXT NOT NULL,
                        adults INTEGER NOT NULL DEFAULT 1,
                        children INTEGER NOT NULL DEFAULT 0,
                        total_price TEXT NOT NULL,
                        status TEXT NOT NULL DEFAULT 'pending',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bookings_room_dates
                    ON Bookings(room_id, check_in_date, check_out_date);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_rooms_available
                    ON Rooms(is_available, hotel_id);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_demo_data(self) -> None:
        """Seed a deterministic demo inventory only when tables are empty."""
        rng = random.Random(self._settings.synthetic_random_seed)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) AS count FROM Rooms;")
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Demo data already present; skipping seed")
                    return

                hotels = [
                    ("hotel-hanoi", "Old Quarter Residence", "Hanoi", "12 Hang Bac"),
                    ("hotel-danang", "My Khe Beach Hotel", "Da Nang", "88 Vo Nguyen Giap"),
                    ("hotel-hcmc", "Saigon Riverside", "Ho Chi Minh City", "5 Ton Duc Thang"),
                ]
                cursor.executemany(
                    "INSERT INTO Hotels (id, name, city, address) VALUES (?, ?, ?, ?);",
                    hotels,
                )

                # (type, price, min_a, max_a, min_c, max_c)
                room_templates = [
                    ("Single Bed", "45", 1, 1, 0, 0),
                    ("Double Bed", "70", 1, 2, 0, 1),
                    ("Luxury Room", "150", 1, 3, 0, 2),
                    ("Family Suite", "120", 2, 4, 0, 3),
                ]
                room_rows = []
                for hotel_id, _, _, _ in hotels:
                    for index, (room_type, price, min_a, max_a, min_c, max_c) in enumerate(
                        room_templates, start=1
                    ):
                        adjustment = Decimal(rng.randint(-10, 10))
                        room_rows.append(
                            (
                                f"{hotel_id}-room-{index}",
                                hotel_id,
                                room_type,
                                str(Decimal(price) + adjustment),
                                min_a,
                                max_a,
                                min_c,
                                max_c,
                                json.dumps(["Free WiFi", "Room Service"]),
                            )
                        )
                cursor.executemany(
                    """
                    INSERT INTO Rooms (
                        id, hotel_id, room_type, price_per_night,
                        min_adults, max_adults, min_children, max_children, amenities
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    room_rows,
                )

                today = datetime.now(timezone.utc).date()
                booking_rows = []
                for room_row in room_rows:
                    if rng.random() >= 0.25:
                        continue
                    check_in = today + timedelta(days=rng.randint(1, 20))
                    check_out = check_in + timedelta(days=rng.randint(1, 4))
                    booking_rows.append(
                        (
                            uuid4().hex,
                            room_row[0],
                            check_in.isoformat(),
                            check_out.isoformat(),
                            1,
                            0,
                            room_row[3],
                            "confirmed",
                        )
                    )
                cursor.executemany(
                    """
                    INSERT INTO Bookings (
                        id, room_id, check_in_date, check_out_date,
                        adults, children, total_price, status
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    booking_rows,
                )
                conn.commit()
            logger.info(
                "Demo seed completed | hotels=%s | rooms=%s | bookings=%s",
                len(hotels),
                len(room_rows),
                len(booking_rows),
            )
        except sqlite3.Error as exc:
            raise RuntimeError(f"Demo data seeding failed: {exc}") from exc

    def create_hotel(
        self,
        name: str,
        city: str,
        address: str = "",
        hotel_id: Optional[str] = None,
    ) -> str:
        resolved_id = hotel_id or uuid4().hex
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO Hotels (id, name, city, address) VALUES (?, ?, ?, ?);",
                (resolved_id, name, city, address),
            )
            conn.commit()
        return resolved_id

    def create_room(
        self,
        hotel_id: str,
        room_type: str,
        price_per_night: Union[int, float, str, Decimal],
        min_adults: int = 1,
        max_adults: int = 2,
        min_children: int = 0,
        max_children: int = 2,
        is_available: bool = True,
        units_available: Optional[int] = None,
        amenities: Iterable[str] = (),
        room_id: Optional[str] = None,
    ) -> str:
        """Insert a room row and return its id."""
        resolved_id = room_id or uuid4().hex
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO Rooms (
                    id, hotel_id, room_type, price_per_night,
                    min_adults, max_adults, min_children, max_children,
                    is_available, units_available, amenities
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    resolved_id,
                    hotel_id,
                    room_type,
                    str(to_decimal(price_per_night)),
                    min_adults,
                    max_adults,
                    min_children,
                    max_children,
                    1 if is_available else 0,
                    units_available,
                    json.dumps(list(amenities)),
                ),
            )
            conn.commit()
        return resolved_id

    def set_room_availability(self, room_id: str, is_available: bool) -> None:
        """Owner-side listing switch; unlisted rooms never reach the optimizer."""
        with self._connect() as conn:
            conn.execute(
                "UPDATE Rooms SET is_available = ? WHERE id = ?;",
                (1 if is_available else 0, room_id),
            )
            conn.commit()

    @staticmethod
    def _row_to_room(row: sqlite3.Row) -> Room:
        hotel = None
        if row["hotel_id"] is not None:
            hotel = HotelSummary(
                hotel_id=str(row["hotel_id"]),
                name=str(row["hotel_name"]),
                city=str(row["hotel_city"]),
                address=str(row["hotel_address"]),
            )
        return Room(
            room_id=str(row["id"]),
            room_type=str(row["room_type"]),
            price_per_night=Decimal(str(row["price_per_night"])),
            min_adults=int(row["min_adults"]),
            max_adults=int(row["max_adults"]),
            min_children=int(row["min_children"]),
            max_children=int(row["max_children"]),
            is_available=bool(row["is_available"]),
            hotel=hotel,
            units_available=(
                int(row["units_available"]) if row["units_available"] is not None else None
            ),
            amenities=tuple(json.loads(row["amenities"] or "[]")),
        )

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_ROOM_COLUMNS}
                FROM Rooms AS r
                LEFT JOIN Hotels AS h ON h.id = r.hotel_id
                WHERE r.id = ?;
                """,
                (room_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return self._row_to_room(row)

    def list_rooms(
        self,
        only_available: bool = True,
        city: Optional[str] = None,
    ) -> list[Room]:
        """Return the room pool in insertion order.

        `city` is a case-insensitive substring match against the hotel city.
        """
        clauses: list[str] = []
        params: list[object] = []
        if only_available:
            clauses.append("r.is_available = 1")
        if city:
            clauses.append("instr(lower(h.city), lower(?)) > 0")
            params.append(city.strip())
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_ROOM_COLUMNS}
                FROM Rooms AS r
                LEFT JOIN Hotels AS h ON h.id = r.hotel_id
                {where}
                ORDER BY r.rowid ASC;
                """,
                tuple(params),
            )
            return [self._row_to_room(row) for row in cursor.fetchall()]

    def create_booking(
        self,
        room_id: str,
        check_in_date: Union[date, str],
        check_out_date: Union[date, str],
        adults: int = 1,
        children: int = 0,
        total_price: Union[int, float, str, Decimal] = 0,
        status: str = "pending",
    ) -> str:
        booking_id = uuid4().hex
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO Bookings (
                    id, room_id, check_in_date, check_out_date,
                    adults, children, total_price, status
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    booking_id,
                    room_id,
                    _iso(check_in_date),
                    _iso(check_out_date),
                    adults,
                    children,
                    str(to_decimal(total_price)),
                    status,
                ),
            )
            conn.commit()
        return booking_id

    def count_overlapping_bookings(
        self,
        room_id: str,
        check_in_date: Union[date, str],
        check_out_date: Union[date, str],
    ) -> int:
        """Count bookings of any status whose stay touches the requested interval."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT COUNT(*) AS count
                FROM Bookings
                WHERE room_id = ?
                  AND check_in_date <= ?
                  AND check_out_date >= ?;
                """,
                (room_id, _iso(check_out_date), _iso(check_in_date)),
            )
            return int(cursor.fetchone()["count"])

    def count_rooms(self) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM Rooms;")
            return int(cursor.fetchone()["count"])
