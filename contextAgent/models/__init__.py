"""Model construction."""

from .resolver import build_chat_model

__all__ = ["build_chat_model"]
