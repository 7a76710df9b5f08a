"""API routers."""

from . import chat, docs, sheets, workflows

__all__ = ["chat", "docs", "sheets", "workflows"]
