"""FastAPI adapter that lets a messaging bridge hand inbound messages to the engine."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, HTTPException, Query, Request

from meeting_setter import __version__
from meeting_setter.config import Config
from meeting_setter.conversation import ConversationStore
from meeting_setter.database import Database
from meeting_setter.errors import PersistenceError
from meeting_setter.llm import Generator
from meeting_setter.orchestrator import NegotiationOrchestrator
from meeting_setter.schemas import InboundMessage, Meeting, OutboundMessage
from meeting_setter.slots import SlotCalendar

log = logging.getLogger(__name__)


def create_app(
    config: Config,
    generate: Generator | None = None,
    today: Callable[[], date] | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = Database(config.db_path)
        calendar = SlotCalendar(db, config.available_times)
        calendar.load()
        app.state.calendar = calendar
        app.state.orchestrator = NegotiationOrchestrator(
            config,
            calendar,
            ConversationStore(config.history_limit),
            generate=generate,
            today=today,
        )
        log.info("Meeting Setter API ready (%d offerable times)", len(config.available_times))

        yield

        db.close()

    app = FastAPI(title="Meeting Setter API", version=__version__, lifespan=lifespan)

    @app.post("/messages", response_model=OutboundMessage)
    async def receive_message(msg: InboundMessage, request: Request) -> OutboundMessage:
        return await request.app.state.orchestrator.handle_event(msg)

    @app.get("/meetings", response_model=list[Meeting])
    async def list_meetings(request: Request, day: date | None = Query(None, alias="date")):
        return request.app.state.calendar.meetings(day)

    @app.delete("/meetings/{day}/{time}")
    async def cancel_meeting(day: date, time: str, request: Request):
        try:
            removed = await request.app.state.calendar.cancel(day, time)
        except PersistenceError:
            log.exception("Cancelling %s %s failed", day, time)
            raise HTTPException(status_code=503, detail="Meeting store unavailable")
        if not removed:
            raise HTTPException(status_code=404, detail="Meeting not found")
        return {"status": "deleted"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
