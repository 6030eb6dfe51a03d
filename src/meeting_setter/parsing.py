"""Defensive extraction of negotiation signals from generated replies."""

from __future__ import annotations

import re

CONFIRMATION_MARKER = "Reunião Agendada!"

_TIME_TOKEN = re.compile(r"\d{2}:\d{2}")
_REASONING = re.compile(r"<think>[\s\S]*?</think>", re.IGNORECASE)


def extract_time(text: str) -> str | None:
    """Return the first ``HH:MM``-shaped token in ``text``; later ones are ignored."""
    match = _TIME_TOKEN.search(text)
    return match.group() if match else None


def has_confirmation_marker(text: str, marker: str = CONFIRMATION_MARKER) -> bool:
    return marker in text


def strip_internal_reasoning(text: str) -> str:
    """Drop any ``<think>...</think>`` segments and surrounding whitespace."""
    return _REASONING.sub("", text).strip()
