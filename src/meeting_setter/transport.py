"""Outbound message delivery to the console or an HTTP messaging bridge."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from rich.console import Console
from rich.panel import Panel

from meeting_setter.config import Config
from meeting_setter.errors import TransportDeliveryError

log = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, contact_id: str, text: str) -> None: ...


class ConsoleTransport:
    """Print messages to the terminal instead of delivering them."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    async def send(self, contact_id: str, text: str) -> None:
        self.console.print(Panel(
            text,
            title=f"📩 Message to {contact_id} (Console Mode)",
            border_style="cyan",
        ))


class WebhookTransport:
    """POST ``{"contact_id", "text"}`` to a messaging bridge."""

    def __init__(self, url: str, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        if not url:
            raise ValueError("WebhookTransport requires a URL")
        self.url = url
        self._client = client
        self.timeout = timeout

    async def send(self, contact_id: str, text: str) -> None:
        payload = {"contact_id": contact_id, "text": text}
        try:
            if self._client is not None:
                resp = await self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(self.url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportDeliveryError(f"Delivery to {contact_id} failed: {e}") from e
        log.debug("Delivered message to %s via %s", contact_id, self.url)


def build_transport(config: Config) -> Transport:
    backend = config.transport_backend.lower()
    if backend == "webhook":
        return WebhookTransport(config.transport_webhook_url)
    return ConsoleTransport()
