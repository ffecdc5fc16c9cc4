"""API routes."""

from chatdesk.api.routes import (
    admin,
    chat,
    health,
    messages,
    sessions,
    survey,
)

__all__ = [
    "admin",
    "chat",
    "health",
    "messages",
    "sessions",
    "survey",
]
