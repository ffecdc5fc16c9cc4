"""Record types persisted by the record store."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from chatdesk.core.datetime_utils import ensure_utc, to_iso_z

Role = Literal["user", "assistant"]
Rating = Literal["good", "bad"]

UNKNOWN = "unknown"


class StoredRecord(BaseModel):
    """Base for every record kept in a JSON collection.

    Unknown keys found in a file are kept so a rewrite never drops them.
    """

    model_config = ConfigDict(extra="allow")

    @field_validator("created_at", "updated_at", "survey_responded_at", mode="after", check_fields=False)
    @classmethod
    def as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @field_serializer("created_at", "updated_at", "survey_responded_at", check_fields=False)
    def iso_z(self, value: datetime | None) -> str | None:
        return to_iso_z(value) if value is not None else None


class ChatMessage(StoredRecord):
    """One turn of a conversation."""

    id: int
    message_id: str
    role: Role
    content: str
    created_at: datetime
    user_ip: str = UNKNOWN
    user_agent: str = UNKNOWN
    session_id: str | None = None
    survey_rating: Rating | None = None
    survey_responded_at: datetime | None = None


class ChatSession(StoredRecord):
    """A named grouping of chat messages."""

    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    message_count: int = 0
    user_ip: str = UNKNOWN


class SurveyResponse(StoredRecord):
    """Standalone satisfaction record, kept next to the rating on the message."""

    id: int
    message_id: str
    rating: Rating
    created_at: datetime
    user_ip: str = UNKNOWN
    user_agent: str = UNKNOWN
