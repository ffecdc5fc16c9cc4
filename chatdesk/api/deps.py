"""API dependencies."""

from dataclasses import dataclass

from fastapi import Request

from chatdesk.core.chat_proxy import ChatProxyClient
from chatdesk.storage.models import UNKNOWN
from chatdesk.storage.record_store import RecordStore


@dataclass
class ClientInfo:
    """Best-effort request metadata stored alongside records."""

    ip: str = UNKNOWN
    user_agent: str = UNKNOWN


def get_record_store(request: Request) -> RecordStore:
    """Record store created at startup."""
    store: RecordStore = request.app.state.record_store
    return store


def get_chat_proxy(request: Request) -> ChatProxyClient:
    """Upstream chat client created at startup."""
    proxy: ChatProxyClient = request.app.state.chat_proxy
    return proxy


def get_client_info(request: Request) -> ClientInfo:
    """Client IP (proxy headers first) and user agent."""
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip() or request.headers.get("x-real-ip", "").strip()
    return ClientInfo(
        ip=ip or UNKNOWN,
        user_agent=request.headers.get("user-agent") or UNKNOWN,
    )
