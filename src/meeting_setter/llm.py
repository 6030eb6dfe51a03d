"""Async text-generation client supporting OpenAI and Anthropic."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from meeting_setter.config import Config
from meeting_setter.errors import GenerationServiceError

log = logging.getLogger(__name__)

Generator = Callable[[str, list[dict]], Awaitable[str]]


async def _call_openai(config: Config, system: str, messages: list[dict]) -> str:
    from openai import AsyncOpenAI

    client = AsyncOpenAI(api_key=config.openai_api_key, timeout=config.llm_timeout_seconds)
    full_messages = [{"role": "system", "content": system}] + messages

    resp = await client.chat.completions.create(
        model=config.llm_model,
        messages=full_messages,
        temperature=config.llm_temperature,
        max_tokens=config.llm_max_tokens,
    )
    return resp.choices[0].message.content or ""


async def _call_anthropic(config: Config, system: str, messages: list[dict]) -> str:
    from anthropic import AsyncAnthropic

    client = AsyncAnthropic(api_key=config.anthropic_api_key, timeout=config.llm_timeout_seconds)
    resp = await client.messages.create(
        model=config.llm_model,
        max_tokens=config.llm_max_tokens,
        temperature=config.llm_temperature,
        system=system,
        messages=messages,
    )
    return "".join(block.text for block in resp.content if getattr(block, "type", "") == "text")


async def chat(config: Config, system: str, messages: list[dict]) -> str:
    """Send a chat request to the configured LLM provider.

    Args:
        config: Application configuration.
        system: System prompt.
        messages: List of {"role": ..., "content": ...} dicts, oldest first.

    Returns:
        The generated text.

    Raises:
        GenerationServiceError: on network, auth or provider errors, or an empty reply.
    """
    call = _call_anthropic if config.llm_provider == "anthropic" else _call_openai
    try:
        text = await call(config, system, messages)
    except Exception as e:
        raise GenerationServiceError(f"{config.llm_provider} call failed: {e}") from e

    if not isinstance(text, str) or not text.strip():
        raise GenerationServiceError(f"{config.llm_provider} returned an empty reply")
    return text


def build_generator(config: Config) -> Generator:
    """Bind ``config`` so callers only supply the prompt and history."""

    async def generate(system: str, messages: list[dict]) -> str:
        return await chat(config, system, messages)

    return generate
