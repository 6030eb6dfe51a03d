"""Data models for the negotiation engine."""

from __future__ import annotations

import datetime as dt
import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class CommitResult(str, Enum):
    COMMITTED = "committed"
    CONFLICT = "conflict"


# ---------------------------------------------------------------------------
# Core models
# ---------------------------------------------------------------------------

class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def as_message(self) -> dict:
        return {"role": self.role.value, "content": self.content}


class Meeting(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    day_of_week: str
    time: str
    attendee_name: str = ""

    @field_validator("time")
    @classmethod
    def _canonical_time(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError(f"time must be HH:MM, got {v!r}")
        return v

    @property
    def slot(self) -> tuple[dt.date, str]:
        return (self.date, self.time)


# ---------------------------------------------------------------------------
# Transport-facing events
# ---------------------------------------------------------------------------

class InboundMessage(BaseModel):
    contact_id: str = Field(min_length=1)
    text: str


class OutboundMessage(BaseModel):
    contact_id: str
    text: str


class Contact(BaseModel):
    phone: str = Field(min_length=1)
    name: str = ""
