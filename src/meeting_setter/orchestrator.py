"""NegotiationOrchestrator — turns one inbound message into one outbound reply."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from meeting_setter.config import Config
from meeting_setter.conversation import ConversationStore
from meeting_setter.errors import GenerationServiceError, PersistenceError
from meeting_setter.llm import Generator, build_generator
from meeting_setter.locks import KeyedLock
from meeting_setter.parsing import extract_time, has_confirmation_marker, strip_internal_reasoning
from meeting_setter.prompts import (
    CLARIFY_NOTICE,
    CONFLICT_NOTICE,
    FALLBACK_REPLY,
    NO_SLOTS_REPLY,
    PERSISTENCE_NOTICE,
    UNAVAILABLE_NOTICE,
    build_system_prompt,
    weekday_label,
)
from meeting_setter.schemas import CommitResult, ConversationTurn, InboundMessage, OutboundMessage, Role
from meeting_setter.slots import SlotCalendar

log = logging.getLogger(__name__)

DEFAULT_ATTENDEE = "Cliente"


class NegotiationOrchestrator:
    """Drives the per-contact negotiation against the shared calendar.

    Messages from the same contact are processed one at a time; different
    contacts interleave freely and only meet at ``SlotCalendar.commit``.
    """

    def __init__(
        self,
        config: Config,
        calendar: SlotCalendar,
        conversations: ConversationStore,
        generate: Generator | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self.config = config
        self.calendar = calendar
        self.conversations = conversations
        self.generate = generate or build_generator(config)
        self._today = today or self._local_today
        self._contact_locks = KeyedLock()

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def handle_event(self, event: InboundMessage) -> OutboundMessage:
        text = await self.handle(event.contact_id, event.text)
        return OutboundMessage(contact_id=event.contact_id, text=text)

    async def handle(self, contact_id: str, text: str) -> str:
        """Process an inbound message and return the reply to deliver."""
        async with self._contact_locks.hold(contact_id):
            return await self._negotiate(contact_id, text)

    # ------------------------------------------------------------------
    # Protocol
    # ------------------------------------------------------------------

    async def _negotiate(self, contact_id: str, text: str) -> str:
        log.info("Message from %s: %s", contact_id, text)
        self.conversations.append(contact_id, ConversationTurn(role=Role.USER, content=text))

        target = self.target_date()
        suggested = self.calendar.next_available(target)
        if suggested is None:
            log.info("No slots left on %s, asking %s for another day", target, contact_id)
            self._remember_reply(contact_id, NO_SLOTS_REPLY)
            return NO_SLOTS_REPLY

        system = build_system_prompt(
            persona_name=self.config.persona_name,
            company_name=self.config.company_name,
            day=target,
            suggested=suggested,
            free=self.calendar.free_times(target),
            booked=self.calendar.booked_times(target),
        )

        try:
            raw = await asyncio.wait_for(
                self.generate(system, self.conversations.as_messages(contact_id)),
                timeout=self.config.llm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            log.error("Generation timed out for %s after %ss", contact_id, self.config.llm_timeout_seconds)
            return FALLBACK_REPLY
        except GenerationServiceError as e:
            log.error("Generation failed for %s: %s", contact_id, e)
            return FALLBACK_REPLY

        reply = strip_internal_reasoning(raw) if isinstance(raw, str) else ""
        if not reply:
            log.error("Generation for %s produced no usable text", contact_id)
            return FALLBACK_REPLY

        if has_confirmation_marker(reply):
            notice = await self._try_commit(contact_id, target, reply)
            if notice:
                reply = f"{reply}\n{notice}"

        self._remember_reply(contact_id, reply)
        log.info("Reply to %s: %s", contact_id, reply)
        return reply

    async def _try_commit(self, contact_id: str, target: date, reply: str) -> str | None:
        """Attempt the booking a confirmed reply announces.

        Returns a notice to append to the reply, or None when the booking stuck.
        """
        time = extract_time(reply)
        if time is None:
            log.info("Confirmation from %s without a time token", contact_id)
            return CLARIFY_NOTICE
        if not self.calendar.is_offerable(time):
            log.info("Confirmed time %s for %s is not an offered slot", time, contact_id)
            free = self.calendar.free_times(target)
            return UNAVAILABLE_NOTICE.format(free=", ".join(free) if free else "nenhum")

        name = self.conversations.first_user_utterance(contact_id) or DEFAULT_ATTENDEE
        try:
            result = await self.calendar.commit(target, weekday_label(target), time, name)
        except PersistenceError as e:
            log.error("Could not persist meeting %s %s for %s: %s", target, time, contact_id, e)
            return PERSISTENCE_NOTICE

        if result is CommitResult.CONFLICT:
            return CONFLICT_NOTICE
        return None

    def _remember_reply(self, contact_id: str, reply: str) -> None:
        self.conversations.append(contact_id, ConversationTurn(role=Role.ASSISTANT, content=reply))

    # ------------------------------------------------------------------
    # Dates
    # ------------------------------------------------------------------

    def target_date(self) -> date:
        """The day under negotiation: the next calendar day."""
        return self._today() + timedelta(days=1)

    def _local_today(self) -> date:
        return datetime.now(tz=ZoneInfo(self.config.timezone)).date()
