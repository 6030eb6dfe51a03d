"""Basic tests for Meeting Setter core modules."""

from __future__ import annotations

import sqlite3
from datetime import date

import pytest
from pydantic import ValidationError

from meeting_setter.config import Config, parse_times
from meeting_setter.conversation import ConversationStore
from meeting_setter.database import Database
from meeting_setter.errors import PersistenceError
from meeting_setter.parsing import (
    CONFIRMATION_MARKER,
    extract_time,
    has_confirmation_marker,
    strip_internal_reasoning,
)
from meeting_setter.prompts import build_system_prompt, weekday_label
from meeting_setter.schemas import ConversationTurn, Meeting, Role


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

def test_config_defaults():
    cfg = Config()
    assert cfg.llm_provider == "openai"
    assert cfg.llm_model == "gpt-4o-mini"
    assert cfg.history_limit == 10
    assert cfg.available_times[0] == "10:00"
    assert cfg.available_times[-1] == "18:00"


def test_config_anthropic_default_model():
    cfg = Config(llm_provider="anthropic")
    assert cfg.llm_model == "claude-sonnet-4-20250514"


def test_parse_times_keeps_first_seen_order():
    assert parse_times("15:00, 14:00,15:00,,09:30") == ("15:00", "14:00", "09:30")


def test_parse_times_rejects_non_canonical():
    with pytest.raises(ValueError):
        parse_times("9:00")


def test_config_requires_times():
    with pytest.raises(ValueError):
        Config(available_times=())


def test_config_caps_history_limit():
    assert Config(history_limit=10).history_limit == 10
    with pytest.raises(ValueError):
        Config(history_limit=11)
    with pytest.raises(ValueError):
        Config(history_limit=0)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

def test_turn_is_immutable():
    turn = ConversationTurn(role=Role.USER, content="Oi")
    with pytest.raises(ValidationError):
        turn.content = "changed"
    assert turn.as_message() == {"role": "user", "content": "Oi"}


def test_meeting_requires_canonical_time():
    with pytest.raises(ValidationError):
        Meeting(date=date(2025, 3, 25), day_of_week="terça-feira", time="2pm")


def test_meeting_parses_iso_date():
    m = Meeting(date="2025-03-25", day_of_week="terça-feira", time="14:00", attendee_name="Ana")
    assert m.date == date(2025, 3, 25)
    assert m.slot == (date(2025, 3, 25), "14:00")


# ---------------------------------------------------------------------------
# ConversationStore
# ---------------------------------------------------------------------------

def test_unseen_contact_has_empty_history():
    store = ConversationStore()
    assert store.get("nobody") == []
    assert store.first_user_utterance("nobody") is None


def test_history_keeps_last_ten_turns():
    store = ConversationStore()
    for i in range(25):
        store.append("c1", ConversationTurn(role=Role.USER, content=f"m{i}"))

    history = store.get("c1")
    assert len(history) == 10
    assert [t.content for t in history] == [f"m{i}" for i in range(15, 25)]


def test_histories_are_per_contact():
    store = ConversationStore()
    store.append("a", ConversationTurn(role=Role.USER, content="from a"))
    store.append("b", ConversationTurn(role=Role.USER, content="from b"))
    assert [t.content for t in store.get("a")] == ["from a"]
    assert sorted(store.contacts()) == ["a", "b"]


def test_store_rejects_limit_above_ten():
    with pytest.raises(ValueError):
        ConversationStore(limit=11)


def test_get_returns_a_copy():
    store = ConversationStore()
    store.append("c1", ConversationTurn(role=Role.USER, content="Oi"))
    store.get("c1").clear()
    assert len(store.get("c1")) == 1


def test_first_user_utterance_follows_eviction():
    store = ConversationStore(limit=3)
    store.append("c1", ConversationTurn(role=Role.USER, content="Ana"))
    store.append("c1", ConversationTurn(role=Role.ASSISTANT, content="Olá Ana"))
    assert store.first_user_utterance("c1") == "Ana"

    store.append("c1", ConversationTurn(role=Role.ASSISTANT, content="Tudo bem?"))
    store.append("c1", ConversationTurn(role=Role.USER, content="Sim"))
    assert store.first_user_utterance("c1") == "Sim"


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------

def test_extract_time_takes_first_occurrence():
    assert extract_time("Pode ser 14:00 ou 15:30?") == "14:00"


def test_extract_time_none_when_absent():
    assert extract_time("Que tal amanhã à tarde?") is None


def test_extract_time_needs_two_digit_hour():
    assert extract_time("às 9:00") is None


def test_confirmation_marker():
    assert has_confirmation_marker(f"Perfeito, amanhã às 14:00. {CONFIRMATION_MARKER}")
    assert not has_confirmation_marker("Reunião agendada para amanhã")


def test_strip_internal_reasoning():
    raw = "<think>should I offer 10:00?\nyes</think>\n  Oi! Podemos falar amanhã às 14:00?  "
    assert strip_internal_reasoning(raw) == "Oi! Podemos falar amanhã às 14:00?"


def test_strip_reasoning_removes_every_segment():
    raw = "<think>a</think>Oi<think>b</think> tudo bem?"
    assert strip_internal_reasoning(raw) == "Oi tudo bem?"


def test_time_inside_reasoning_is_not_seen_after_stripping():
    raw = "<think>11:00 is taken</think>Fechado às 15:00!"
    assert extract_time(strip_internal_reasoning(raw)) == "15:00"


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

def test_weekday_label():
    assert weekday_label(date(2025, 3, 25)) == "terça-feira"
    assert weekday_label(date(2025, 3, 30)) == "domingo"


def test_system_prompt_carries_slot_facts():
    prompt = build_system_prompt(
        persona_name="Guilherme Barbosa",
        company_name="Genesis",
        day=date(2025, 3, 25),
        suggested="14:30",
        free=["14:30", "15:00"],
        booked=["14:00"],
    )
    assert "Guilherme Barbosa" in prompt
    assert "terça-feira, 25/03/2025" in prompt
    assert "14:30, 15:00" in prompt
    assert "Horários já ocupados: 14:00" in prompt
    assert CONFIRMATION_MARKER in prompt


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

def test_insert_and_list_meetings(db: Database):
    m = Meeting(date=date(2025, 3, 25), day_of_week="terça-feira", time="14:00", attendee_name="Ana")
    assert db.insert_meeting(m) is True

    loaded = db.list_meetings()
    assert loaded == [m]


def test_duplicate_slot_rejected_by_store(db: Database):
    m = Meeting(date=date(2025, 3, 25), day_of_week="terça-feira", time="14:00", attendee_name="Ana")
    other = Meeting(date=date(2025, 3, 25), day_of_week="terça-feira", time="14:00", attendee_name="Bia")
    assert db.insert_meeting(m)
    assert db.insert_meeting(other) is False
    assert [x.attendee_name for x in db.list_meetings()] == ["Ana"]


def test_delete_meeting(db: Database):
    m = Meeting(date=date(2025, 3, 25), day_of_week="terça-feira", time="14:00")
    db.insert_meeting(m)
    assert db.delete_meeting(date(2025, 3, 25), "14:00") is True
    assert db.delete_meeting(date(2025, 3, 25), "14:00") is False
    assert db.list_meetings() == []


def test_corrupt_store_raises_persistence_error(tmp_path):
    path = tmp_path / "meetings.db"
    path.write_bytes(b"this is not a sqlite database" * 100)
    database = Database(path)
    with pytest.raises(PersistenceError):
        database.list_meetings()


def test_bad_row_raises_validation_error(db: Database):
    db.conn.execute(
        "INSERT INTO meetings (date, day_of_week, time, attendee_name) VALUES (?, ?, ?, ?)",
        ("2025-03-25", "terça-feira", "2pm", "Ana"),
    )
    db.conn.commit()
    with pytest.raises(ValidationError):
        db.list_meetings()


def test_store_is_shared_across_connections(db: Database, config):
    db.insert_meeting(Meeting(date=date(2025, 3, 25), day_of_week="terça-feira", time="15:00"))
    raw = sqlite3.connect(str(config.db_path))
    try:
        rows = raw.execute("SELECT date, time FROM meetings").fetchall()
    finally:
        raw.close()
    assert rows == [("2025-03-25", "15:00")]
