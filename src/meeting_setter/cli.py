"""Terminal entry point: interactive negotiation, bulk campaign, HTTP server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.theme import Theme

from meeting_setter import __version__
from meeting_setter.campaign import load_contacts, run_campaign
from meeting_setter.config import Config, load_config
from meeting_setter.conversation import ConversationStore
from meeting_setter.database import Database
from meeting_setter.orchestrator import NegotiationOrchestrator
from meeting_setter.slots import SlotCalendar
from meeting_setter.transport import build_transport

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})

console = Console(theme=custom_theme)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``meeting-setter`` command."""
    parser = argparse.ArgumentParser(prog="meeting-setter", description="Conversational meeting scheduler.")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    sub = parser.add_subparsers(dest="command", required=True)

    chat_p = sub.add_parser("chat", help="Negotiate interactively as a single contact")
    chat_p.add_argument("--contact", default="console", help="Contact identifier to simulate")

    camp_p = sub.add_parser("campaign", help="Send the opening message to every contact")
    camp_p.add_argument("contacts", nargs="?", default=None, help="Contacts JSON file")

    serve_p = sub.add_parser("serve", help="Run the HTTP adapter")
    serve_p.add_argument("--host", default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    config = load_config(args.env_file)
    setup_logging(config.log_level)

    if args.command == "campaign":
        asyncio.run(_campaign(config, args.contacts))
        return

    _require_api_key(config)
    if args.command == "serve":
        _serve(config, args.host, args.port)
    else:
        asyncio.run(_chat(config, args.contact))


def _require_api_key(config: Config) -> None:
    if config.llm_provider == "anthropic" and not config.anthropic_api_key:
        console.print("[error]ANTHROPIC_API_KEY not set. Copy env.example to .env and fill in your key.[/error]")
        sys.exit(1)
    if config.llm_provider == "openai" and not config.openai_api_key:
        console.print("[error]OPENAI_API_KEY not set. Copy env.example to .env and fill in your key.[/error]")
        sys.exit(1)


async def _chat(config: Config, contact_id: str) -> None:
    """REPL where the terminal user plays the contact."""
    console.print(Panel(
        f"Negotiating as [bold]{contact_id}[/bold]. Type [bold]quit[/bold] to leave.",
        title=f"Meeting Setter v{__version__}",
        border_style="cyan",
    ))

    db = Database(config.db_path)
    calendar = SlotCalendar(db, config.available_times)
    calendar.load()
    orch = NegotiationOrchestrator(config, calendar, ConversationStore(config.history_limit))

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(console.input, "\n[bold green]You>[/bold green] ")).strip()
            except (EOFError, KeyboardInterrupt):
                break

            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                break

            reply = await orch.handle(contact_id, user_input)
            console.print(f"\n[bold cyan]{config.persona_name}>[/bold cyan] {reply}")
    finally:
        console.print("[info]Goodbye![/info]")
        db.close()


async def _campaign(config: Config, contacts_path: str | None) -> None:
    contacts = load_contacts(contacts_path or config.contacts_path)
    if not contacts:
        console.print("[warning]No contacts to message.[/warning]")
        return

    report = await run_campaign(build_transport(config), contacts, config.campaign_template)
    console.print(
        f"[success]✅ Sent {len(report.sent)}/{len(contacts)} opening messages.[/success]"
    )
    if report.failed:
        console.print(f"[error]Failed: {', '.join(report.failed)}[/error]")


def _serve(config: Config, host: str, port: int) -> None:
    import uvicorn

    from meeting_setter.api import create_app

    uvicorn.run(create_app(config), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
