"""Bulk outreach: one templated opening message per contact."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from meeting_setter.errors import TransportDeliveryError
from meeting_setter.schemas import Contact
from meeting_setter.transport import Transport

log = logging.getLogger(__name__)

NAME_PLACEHOLDER = "[NOME]"

_contacts_adapter = TypeAdapter(list[Contact])


@dataclass
class CampaignReport:
    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def load_contacts(path: Path | str) -> list[Contact]:
    """Read a JSON array of ``{"phone", "name"}`` objects.

    A missing or malformed file is logged and yields an empty list.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
        return _contacts_adapter.validate_python(json.loads(raw))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        log.error("Could not load contacts from %s: %s", path, e)
        return []


def personalize(template: str, name: str) -> str:
    return template.replace(NAME_PLACEHOLDER, name)


async def run_campaign(transport: Transport, contacts: list[Contact], template: str) -> CampaignReport:
    """Send the opening message to each contact once, in order.

    A failed delivery is logged and does not stop the remaining sends.
    """
    report = CampaignReport()
    for contact in contacts:
        message = personalize(template, contact.name)
        try:
            await transport.send(contact.phone, message)
        except TransportDeliveryError as e:
            log.error("Failed to send opening message to %s: %s", contact.phone, e)
            report.failed.append(contact.phone)
            continue
        log.info("Opening message sent to %s", contact.phone)
        report.sent.append(contact.phone)
    return report
