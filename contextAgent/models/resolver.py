"""Chat model construction from environment-derived settings."""

from __future__ import annotations

import logging
from typing import Dict

from langchain_openai import ChatOpenAI

from contextAgent.config.settings import ModelSettings

LOGGER = logging.getLogger("contextagent.models")


def _chat_kwargs(settings: ModelSettings) -> Dict[str, object]:
    if not settings.api_key:
        raise RuntimeError(
            f"Missing API key for model {settings.name}. Set OPENAI_API_KEY in .env."
        )
    kwargs: Dict[str, object] = {
        "model": settings.name,
        "api_key": settings.api_key,
        "temperature": settings.temperature,
    }
    if settings.base_url:
        kwargs["base_url"] = settings.base_url
    return kwargs


def build_chat_model(settings: ModelSettings) -> ChatOpenAI:
    """Return an OpenAI-compatible chat client (DeepSeek, OpenAI, vLLM, ...).

    Raises:
        RuntimeError: If no API key is configured
    """
    model = ChatOpenAI(**_chat_kwargs(settings))
    LOGGER.info(f"Chat model ready: {settings.name} ({settings.base_url or 'default endpoint'})")
    return model


__all__ = ["build_chat_model"]
