"""API routers."""

from llynx.api import chat, models

__all__ = ["chat", "models"]
