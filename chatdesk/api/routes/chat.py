"""Chat endpoint that relays requests to the upstream LLM API."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from chatdesk.api.deps import get_chat_proxy
from chatdesk.core.chat_proxy import ChatProxyClient, ChatProxyError
from chatdesk.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("")
async def chat(
    request: Request,
    proxy: ChatProxyClient = Depends(get_chat_proxy),
) -> Response:
    """Forward the JSON body upstream and relay the answer.

    JSON answers are returned as JSON; anything else is passed through with
    the upstream content type. Upstream error statuses are preserved.
    """
    if not proxy.url:
        raise HTTPException(status_code=500, detail="CHAT_API_URL is not configured")

    try:
        body: Any = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from None

    try:
        reply = await proxy.forward(body)
    except ChatProxyError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e

    if reply.ok:
        if reply.is_json:
            return JSONResponse(content=reply.json())
        return Response(content=reply.text, status_code=200, media_type=reply.content_type)

    if reply.is_json:
        payload = reply.json()
        error = payload.get("error") if isinstance(payload, dict) else None
        return JSONResponse(
            status_code=reply.status_code,
            content={"error": error or payload},
        )
    return Response(
        content=reply.text,
        status_code=reply.status_code,
        media_type=reply.content_type,
    )
