"""Shared fixtures for Meeting Setter tests."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from meeting_setter.config import Config
from meeting_setter.conversation import ConversationStore
from meeting_setter.database import Database
from meeting_setter.errors import GenerationServiceError
from meeting_setter.orchestrator import NegotiationOrchestrator
from meeting_setter.slots import SlotCalendar

TODAY = date(2025, 3, 24)
TARGET = date(2025, 3, 25)  # a Tuesday


class FakeGenerator:
    """Stands in for the text-generation service.

    Each queued item is returned in order; exceptions are raised instead.
    """

    def __init__(self, *replies: str | Exception, delay: float = 0.0) -> None:
        self.replies = list(replies)
        self.delay = delay
        self.calls: list[tuple[str, list[dict]]] = []

    async def __call__(self, system: str, messages: list[dict]) -> str:
        self.calls.append((system, [dict(m) for m in messages]))
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.replies:
            raise GenerationServiceError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def config(tmp_path):
    return Config(
        openai_api_key="test-key",
        db_path=tmp_path / "meetings.db",
        available_times=("14:00", "14:30", "15:00"),
        llm_timeout_seconds=2.0,
    )


@pytest.fixture
def db(config):
    database = Database(config.db_path)
    yield database
    database.close()


@pytest.fixture
def calendar(db, config):
    cal = SlotCalendar(db, config.available_times)
    cal.load()
    return cal


@pytest.fixture
def conversations():
    return ConversationStore()


@pytest.fixture
def make_orchestrator(config, calendar, conversations):
    def _make(generate) -> NegotiationOrchestrator:
        return NegotiationOrchestrator(
            config, calendar, conversations, generate=generate, today=lambda: TODAY,
        )

    return _make
