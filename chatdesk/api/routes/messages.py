"""Chat message recording endpoint."""

from fastapi import APIRouter, Depends
from pydantic import Field

from chatdesk.api.deps import ClientInfo, get_client_info, get_record_store
from chatdesk.api.schemas import ApiModel
from chatdesk.storage import Role
from chatdesk.storage.record_store import RecordStore

router = APIRouter()


class ChatMessageInput(ApiModel):
    """Chat message input schema."""

    message_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Client-side message identifier, referenced by survey responses",
    )
    role: Role = Field(
        ...,
        description="'user' or 'assistant'",
    )
    content: str = Field(
        ...,
        min_length=1,
        description="Message text",
    )
    session_id: str | None = Field(
        default=None,
        max_length=128,
        description="Session the message belongs to",
    )


class ChatMessageSaved(ApiModel):
    success: bool = True
    message_id_db: int = Field(..., serialization_alias="messageId_db")
    message: str = "Chat message saved successfully"


@router.post("", response_model=ChatMessageSaved, response_model_by_alias=True)
def save_chat_message(
    data: ChatMessageInput,
    client: ClientInfo = Depends(get_client_info),
    store: RecordStore = Depends(get_record_store),
) -> ChatMessageSaved:
    """Store one chat turn."""
    new_id = store.save_chat_message(
        data.message_id,
        data.role,
        data.content,
        user_ip=client.ip,
        user_agent=client.user_agent,
        session_id=data.session_id,
    )
    return ChatMessageSaved(message_id_db=new_id)
