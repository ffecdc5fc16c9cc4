"""JSON-file persistence for chat history.

``RecordStore`` lives in ``chatdesk.storage.record_store``.
"""

from chatdesk.storage.errors import CollectionWriteError, CorruptCollectionError, RecordStoreError
from chatdesk.storage.models import ChatMessage, ChatSession, Rating, Role, SurveyResponse

__all__ = [
    "ChatMessage",
    "ChatSession",
    "CollectionWriteError",
    "CorruptCollectionError",
    "Rating",
    "RecordStoreError",
    "Role",
    "SurveyResponse",
]
