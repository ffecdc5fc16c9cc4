"""Chat session endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field

from chatdesk.api.deps import ClientInfo, get_client_info, get_record_store
from chatdesk.api.schemas import ApiModel, Pagination
from chatdesk.core.logging import get_logger
from chatdesk.storage import ChatMessage, ChatSession
from chatdesk.storage.record_store import RecordStore

logger = get_logger(__name__)

router = APIRouter()


class SessionInput(ApiModel):
    """Session create/update schema."""

    session_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Client-generated session identifier",
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Session title shown in the history list",
    )


class SessionListResponse(ApiModel):
    success: bool = True
    sessions: list[ChatSession]
    pagination: Pagination


class SessionResponse(ApiModel):
    success: bool = True
    session: ChatSession


class SessionMessagesResponse(ApiModel):
    success: bool = True
    session_id: str
    messages: list[ChatMessage]


class SessionDeletedResponse(ApiModel):
    success: bool = True
    message: str = "Session deleted successfully"


@router.get("", response_model=SessionListResponse)
def list_sessions(
    limit: int = Query(
        default=50,
        ge=1,
        le=1000,
        description="Maximum number of sessions to return",
    ),
    offset: int = Query(
        default=0,
        ge=0,
        description="Offset for pagination",
    ),
    store: RecordStore = Depends(get_record_store),
) -> SessionListResponse:
    """Sessions, most recently updated first."""
    sessions = store.get_chat_sessions(limit, offset)
    return SessionListResponse(
        sessions=sessions,
        pagination=Pagination(limit=limit, offset=offset, total=len(sessions)),
    )


@router.post("", response_model=SessionResponse)
def create_or_update_session(
    data: SessionInput,
    client: ClientInfo = Depends(get_client_info),
    store: RecordStore = Depends(get_record_store),
) -> SessionResponse:
    """Create a session, or retitle an existing one."""
    session = store.create_or_update_session(data.session_id, data.title, user_ip=client.ip)
    return SessionResponse(session=session)


@router.delete("", response_model=SessionDeletedResponse)
def delete_session(
    session_id: str = Query(
        ...,
        alias="sessionId",
        min_length=1,
        max_length=128,
        description="Session to delete together with its messages",
    ),
    store: RecordStore = Depends(get_record_store),
) -> SessionDeletedResponse:
    """Delete a session and its messages."""
    if not store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionDeletedResponse()


@router.get("/{session_id}", response_model=SessionMessagesResponse)
def get_session_messages(
    session_id: str,
    store: RecordStore = Depends(get_record_store),
) -> SessionMessagesResponse:
    """Messages of one session, oldest first."""
    messages = store.get_chat_messages_by_session(session_id)
    logger.debug(f"Loaded {len(messages)} messages for session {session_id}")
    return SessionMessagesResponse(session_id=session_id, messages=messages)
