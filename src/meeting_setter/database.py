"""SQLite persistence layer for committed meetings."""

from __future__ import annotations

import sqlite3
import threading
from datetime import date
from pathlib import Path

from meeting_setter.errors import PersistenceError
from meeting_setter.schemas import Meeting


class Database:
    """Durable store of meetings, one row per ``(date, time)`` slot.

    The connection is opened lazily so a missing or unreadable file does not
    prevent start-up; every failure surfaces as :class:`PersistenceError`.
    """

    def __init__(self, db_path: Path | str = "meetings.db") -> None:
        self.db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            conn: sqlite3.Connection | None = None
            try:
                conn = sqlite3.connect(self.db_path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                self._init_tables(conn)
            except sqlite3.Error as e:
                if conn is not None:
                    conn.close()
                raise PersistenceError(f"Cannot open meeting store {self.db_path}: {e}") from e
            self._conn = conn
        return self._conn

    def _init_tables(self, conn: sqlite3.Connection) -> None:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS meetings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                date TEXT NOT NULL,          -- ISO calendar date
                day_of_week TEXT NOT NULL,
                time TEXT NOT NULL,          -- canonical HH:MM
                attendee_name TEXT,
                UNIQUE (date, time)
            );
        """)
        conn.commit()

    # -- Meetings -------------------------------------------------------------

    def insert_meeting(self, m: Meeting) -> bool:
        """Write a meeting through to disk.

        Returns False when the slot is already taken in storage.
        """
        with self._lock:
            try:
                self.conn.execute(
                    """INSERT INTO meetings (date, day_of_week, time, attendee_name)
                       VALUES (?, ?, ?, ?)""",
                    (m.date.isoformat(), m.day_of_week, m.time, m.attendee_name),
                )
                self.conn.commit()
            except sqlite3.IntegrityError:
                self.conn.rollback()
                return False
            except sqlite3.Error as e:
                raise PersistenceError(f"Cannot write meeting {m.date} {m.time}: {e}") from e
        return True

    def delete_meeting(self, day: date, time: str) -> bool:
        with self._lock:
            try:
                cur = self.conn.execute(
                    "DELETE FROM meetings WHERE date = ? AND time = ?",
                    (day.isoformat(), time),
                )
                self.conn.commit()
            except sqlite3.Error as e:
                raise PersistenceError(f"Cannot delete meeting {day} {time}: {e}") from e
        return cur.rowcount > 0

    def list_meetings(self) -> list[Meeting]:
        """Return every stored meeting in insertion order.

        Raises pydantic ``ValidationError`` if a row does not match the schema.
        """
        with self._lock:
            try:
                rows = self.conn.execute(
                    "SELECT date, day_of_week, time, attendee_name FROM meetings ORDER BY id"
                ).fetchall()
            except sqlite3.Error as e:
                raise PersistenceError(f"Cannot read meeting store {self.db_path}: {e}") from e
        return [self._row_to_meeting(r) for r in rows]

    def get_meeting(self, day: date, time: str) -> Meeting | None:
        with self._lock:
            try:
                row = self.conn.execute(
                    "SELECT date, day_of_week, time, attendee_name FROM meetings WHERE date = ? AND time = ?",
                    (day.isoformat(), time),
                ).fetchone()
            except sqlite3.Error as e:
                raise PersistenceError(f"Cannot read meeting {day} {time}: {e}") from e
        if not row:
            return None
        return self._row_to_meeting(row)

    def _row_to_meeting(self, row: sqlite3.Row) -> Meeting:
        return Meeting(
            date=row["date"],
            day_of_week=row["day_of_week"],
            time=row["time"],
            attendee_name=row["attendee_name"] or "",
        )

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
