"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_AVAILABLE_TIMES = (
    "10:00", "11:00", "12:00", "13:00", "14:00",
    "15:00", "16:00", "17:00", "18:00",
)

DEFAULT_CAMPAIGN_TEMPLATE = (
    "Olá, boa tarde! Poderia me confirmar se estou falando com o CEO? "
    "Caso não, poderia me direcionar para ele, por favor? "
    "Temos interesse em entender melhor como funciona a [NOME]."
)

MAX_HISTORY_LIMIT = 10

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass
class Config:
    llm_provider: str = "openai"
    llm_model: str = ""
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    llm_temperature: float = 0.7
    llm_max_tokens: int = 500
    llm_timeout_seconds: float = 30.0

    db_path: Path = field(default_factory=lambda: Path("meetings.db"))
    timezone: str = "America/Sao_Paulo"
    available_times: tuple[str, ...] = DEFAULT_AVAILABLE_TIMES
    history_limit: int = 10

    persona_name: str = "Guilherme Barbosa"
    company_name: str = "Genesis"

    transport_backend: str = "console"
    transport_webhook_url: str = ""
    contacts_path: Path = field(default_factory=lambda: Path("contacts.json"))
    campaign_template: str = DEFAULT_CAMPAIGN_TEMPLATE

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.llm_model:
            self.llm_model = {
                "anthropic": "claude-sonnet-4-20250514",
                "openai": "gpt-4o-mini",
            }.get(self.llm_provider, "gpt-4o-mini")
        self.available_times = parse_times(self.available_times)
        if not self.available_times:
            raise ValueError("available_times must contain at least one HH:MM entry")
        if not 1 <= self.history_limit <= MAX_HISTORY_LIMIT:
            raise ValueError(f"history_limit must be between 1 and {MAX_HISTORY_LIMIT}")


def parse_times(raw: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Normalise a comma list (or sequence) of HH:MM strings, keeping first-seen order."""
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    seen: list[str] = []
    for item in items:
        value = item.strip()
        if not value:
            continue
        if not _TIME_RE.match(value):
            raise ValueError(f"Invalid time {value!r}; expected HH:MM")
        if value not in seen:
            seen.append(value)
    return tuple(seen)


def load_config(env_file: str | None = None) -> Config:
    """Load configuration from .env file and environment variables."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return Config(
        llm_provider=os.getenv("LLM_PROVIDER", "openai"),
        llm_model=os.getenv("LLM_MODEL", ""),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
        llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "500")),
        llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
        db_path=Path(os.getenv("DB_PATH", "meetings.db")),
        timezone=os.getenv("TIMEZONE", "America/Sao_Paulo"),
        available_times=parse_times(os.getenv("AVAILABLE_TIMES", ",".join(DEFAULT_AVAILABLE_TIMES))),
        history_limit=int(os.getenv("HISTORY_LIMIT", "10")),
        persona_name=os.getenv("PERSONA_NAME", "Guilherme Barbosa"),
        company_name=os.getenv("COMPANY_NAME", "Genesis"),
        transport_backend=os.getenv("TRANSPORT_BACKEND", "console"),
        transport_webhook_url=os.getenv("TRANSPORT_WEBHOOK_URL", ""),
        contacts_path=Path(os.getenv("CONTACTS_PATH", "contacts.json")),
        campaign_template=os.getenv("CAMPAIGN_TEMPLATE", DEFAULT_CAMPAIGN_TEMPLATE),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
