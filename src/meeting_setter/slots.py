"""SlotCalendar — the single source of truth for which slots are taken."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from pydantic import ValidationError

from meeting_setter.database import Database
from meeting_setter.errors import PersistenceError
from meeting_setter.schemas import CommitResult, Meeting

log = logging.getLogger(__name__)


class SlotCalendar:
    """Bookable slots plus the committed meetings, held in memory.

    ``available_times`` is the canonical priority order offered to contacts.
    Commits are serialised by one lock and written through to ``db`` before
    they become visible.
    """

    def __init__(self, db: Database, available_times: tuple[str, ...] | list[str]) -> None:
        self.db = db
        self.available_times: tuple[str, ...] = tuple(available_times)
        self._meetings: dict[tuple[date, str], Meeting] = {}
        self._commit_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> int:
        """Replace in-memory state with the persisted meetings.

        A missing, unreadable or schema-mismatched store yields an empty
        calendar. Returns the number of meetings loaded.
        """
        try:
            stored = self.db.list_meetings()
        except (PersistenceError, ValidationError) as e:
            log.warning("Meeting store unusable, starting with an empty calendar: %s", e)
            self._meetings = {}
            return 0

        self._meetings = {}
        for m in stored:
            self._meetings.setdefault(m.slot, m)
        log.info("Loaded %d meetings from %s", len(self._meetings), self.db.db_path)
        return len(self._meetings)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_available(self, day: date, time: str) -> bool:
        return (day, time) not in self._meetings

    def is_offerable(self, time: str) -> bool:
        return time in self.available_times

    def next_available(self, day: date) -> str | None:
        """First free time on ``day`` in ``available_times`` order, or None."""
        for time in self.available_times:
            if self.is_available(day, time):
                return time
        return None

    def free_times(self, day: date) -> list[str]:
        return [t for t in self.available_times if self.is_available(day, t)]

    def booked_times(self, day: date) -> list[str]:
        return sorted(t for (d, t) in self._meetings if d == day)

    def meetings(self, day: date | None = None) -> list[Meeting]:
        items = sorted(self._meetings.values(), key=lambda m: (m.date, m.time))
        if day is None:
            return items
        return [m for m in items if m.date == day]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def commit(self, day: date, day_of_week: str, time: str, attendee_name: str) -> CommitResult:
        """Book ``(day, time)`` if it is still free.

        Availability is re-checked under the lock, so of two racing commits for
        the same slot exactly one wins. Raises PersistenceError when the write
        fails; the in-memory calendar is then left untouched.
        """
        async with self._commit_lock:
            if not self.is_available(day, time):
                log.info("Slot %s %s already taken", day, time)
                return CommitResult.CONFLICT

            meeting = Meeting(date=day, day_of_week=day_of_week, time=time, attendee_name=attendee_name)
            written = await asyncio.to_thread(self.db.insert_meeting, meeting)
            if not written:
                log.warning("Slot %s %s taken in storage but not in memory", day, time)
                self._meetings[meeting.slot] = await self._stored_meeting(meeting)
                return CommitResult.CONFLICT

            self._meetings[meeting.slot] = meeting
            log.info("Booked %s (%s) %s for %r", day, day_of_week, time, attendee_name)
            return CommitResult.COMMITTED

    async def _stored_meeting(self, attempted: Meeting) -> Meeting:
        """The meeting on disk for ``attempted.slot``, so the slot stops being offered.

        Falls back to a nameless placeholder when the row cannot be read back.
        """
        try:
            stored = await asyncio.to_thread(self.db.get_meeting, attempted.date, attempted.time)
        except (PersistenceError, ValidationError) as e:
            log.warning("Could not read back %s %s: %s", attempted.date, attempted.time, e)
            stored = None
        return stored or attempted.model_copy(update={"attendee_name": ""})

    async def cancel(self, day: date, time: str) -> bool:
        """Administrative removal of a booked meeting."""
        async with self._commit_lock:
            if self.is_available(day, time):
                return False
            await asyncio.to_thread(self.db.delete_meeting, day, time)
            del self._meetings[(day, time)]
            log.info("Cancelled meeting %s %s", day, time)
            return True
