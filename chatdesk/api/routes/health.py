"""Health check endpoints."""

import logging
import os
import time
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from chatdesk.api.deps import get_chat_proxy, get_record_store
from chatdesk.core.chat_proxy import ChatProxyClient
from chatdesk.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()


def check_storage(store: RecordStore) -> dict[str, Any]:
    """Check that the data directory exists and every collection parses.

    Returns:
        dict with status, latency_ms, and optional error
    """
    start = time.perf_counter()
    try:
        store.initialize()
        if not os.access(store.base_dir, os.W_OK):
            return {"status": "unhealthy", "error": f"{store.base_dir} is not writable"}

        counts = {
            "chat_messages": len(store.messages.load()),
            "chat_sessions": len(store.sessions.load()),
            "survey_responses": len(store.surveys.load()),
        }
        return {
            "status": "healthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            "records": counts,
        }
    except Exception as e:
        logger.error(f"Storage health check failed: {e}")
        return {"status": "unhealthy", "error": "Record store unavailable"}


def check_upstream(proxy: ChatProxyClient) -> dict[str, Any]:
    """Report whether the chat proxy has an upstream configured."""
    if not proxy.url:
        return {"status": "degraded", "error": "CHAT_API_URL is not configured"}
    return {"status": "healthy"}


@router.get("/health")
def health_check(
    store: RecordStore = Depends(get_record_store),
    proxy: ChatProxyClient = Depends(get_chat_proxy),
) -> JSONResponse:
    """Storage and upstream configuration status.

    Answers 503 when storage is unhealthy, 200 otherwise.
    """
    start = time.perf_counter()
    checks = {
        "storage": check_storage(store),
        "upstream": check_upstream(proxy),
    }

    statuses = {check["status"] for check in checks.values()}
    if "unhealthy" in statuses:
        overall = "unhealthy"
    elif "degraded" in statuses:
        overall = "degraded"
    else:
        overall = "healthy"

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE if overall == "unhealthy" else status.HTTP_200_OK,
        content={
            "status": overall,
            "timestamp": datetime.now(UTC).isoformat(),
            "response_time_ms": round((time.perf_counter() - start) * 1000, 2),
            "checks": checks,
        },
    )
