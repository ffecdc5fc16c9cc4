"""Record store for chat messages, chat sessions and survey responses.

Each collection lives in its own JSON file under ``base_dir``. Every
operation loads the whole collection, works on it in memory and, for
mutations, writes the whole collection back. A re-entrant lock serializes
those cycles so concurrent handlers in one process cannot lose updates.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import TypeVar

from chatdesk.core.datetime_utils import utc_now
from chatdesk.services.statistics import ChatStats, SurveyStats, chat_stats, survey_stats
from chatdesk.storage.json_file import JsonCollection
from chatdesk.storage.models import (
    UNKNOWN,
    ChatMessage,
    ChatSession,
    Rating,
    Role,
    SurveyResponse,
)

logger = logging.getLogger(__name__)

CHAT_MESSAGES_FILE = "chat-messages.json"
CHAT_SESSIONS_FILE = "chat-sessions.json"
SURVEY_RESPONSES_FILE = "survey-responses.json"

T = TypeVar("T")


def _next_id(records: list[ChatMessage] | list[SurveyResponse], reserved: list[int]) -> int:
    return max([record.id for record in records] + reserved, default=0) + 1


def _page(records: list[T], limit: int, offset: int) -> list[T]:
    return records[offset : offset + limit]


class RecordStore:
    """File-backed store for the chat history collections."""

    def __init__(
        self,
        base_dir: str | Path,
        clock: Callable[[], datetime] = utc_now,
        strict_reads: bool = False,
    ) -> None:
        """
        Args:
            base_dir: Directory holding the three collection files
            clock: Source of "now" for timestamps and statistics windows
            strict_reads: Raise on corrupt files instead of reading them as empty
        """
        self.base_dir = Path(base_dir)
        self._clock = clock
        self._lock = threading.RLock()

        self.messages = JsonCollection(self.base_dir / CHAT_MESSAGES_FILE, ChatMessage, strict_reads)
        self.sessions = JsonCollection(self.base_dir / CHAT_SESSIONS_FILE, ChatSession, strict_reads)
        self.surveys = JsonCollection(self.base_dir / SURVEY_RESPONSES_FILE, SurveyResponse, strict_reads)

    def _now(self) -> datetime:
        # Stored timestamps have millisecond precision
        now = self._clock()
        return now.replace(microsecond=now.microsecond // 1000 * 1000)

    def initialize(self) -> None:
        """Create the data directory and empty collection files."""
        for collection in (self.messages, self.sessions, self.surveys):
            collection.ensure()

    # ------------------------------------------------------------------
    # Chat messages
    # ------------------------------------------------------------------

    def save_chat_message(
        self,
        message_id: str,
        role: Role,
        content: str,
        user_ip: str | None = None,
        user_agent: str | None = None,
        session_id: str | None = None,
    ) -> int:
        """Append a chat message and return its assigned id."""
        with self._lock:
            messages = self.messages.load()
            new_id = _next_id(messages, self.messages.unparsed_ids())
            messages.append(
                ChatMessage(
                    id=new_id,
                    message_id=message_id,
                    role=role,
                    content=content,
                    created_at=self._now(),
                    user_ip=user_ip or UNKNOWN,
                    user_agent=user_agent or UNKNOWN,
                    session_id=session_id,
                )
            )
            self.messages.save(messages)

        logger.info(f"Chat message saved: ID {new_id}, message {message_id} from {role}")
        return new_id

    def update_chat_message_with_survey(self, message_id: str, rating: Rating) -> bool:
        """Attach a rating to the first message with ``message_id``.

        Returns False, without touching the file, when no message matches.
        """
        with self._lock:
            messages = self.messages.load()
            target = next((m for m in messages if m.message_id == message_id), None)
            if target is None:
                return False

            target.survey_rating = rating
            target.survey_responded_at = self._now()
            self.messages.save(messages)
            return True

    def get_chat_messages(self, limit: int = 100, offset: int = 0) -> list[ChatMessage]:
        """All messages, newest first, paginated."""
        messages = self.messages.load()
        messages.sort(key=lambda m: m.created_at, reverse=True)
        return _page(messages, limit, offset)

    def get_chat_messages_by_session(self, session_id: str) -> list[ChatMessage]:
        """Messages of one session in chronological order."""
        messages = [m for m in self.messages.load() if m.session_id == session_id]
        messages.sort(key=lambda m: m.created_at)
        return messages

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_or_update_session(
        self,
        session_id: str,
        title: str,
        user_ip: str | None = None,
    ) -> ChatSession:
        """Create a session, or retitle an existing one and refresh its count."""
        with self._lock:
            sessions = self.sessions.load()
            session = next((s for s in sessions if s.id == session_id), None)

            if session is not None:
                session.title = title
                session.updated_at = self._now()
                session.message_count = len(self.get_chat_messages_by_session(session_id))
            else:
                now = self._now()
                session = ChatSession(
                    id=session_id,
                    title=title,
                    created_at=now,
                    updated_at=now,
                    message_count=0,
                    user_ip=user_ip or UNKNOWN,
                )
                sessions.append(session)
                logger.info(f"Created chat session {session_id}")

            self.sessions.save(sessions)
            return session

    def get_chat_session(self, session_id: str) -> ChatSession | None:
        return next((s for s in self.sessions.load() if s.id == session_id), None)

    def get_chat_sessions(self, limit: int = 50, offset: int = 0) -> list[ChatSession]:
        """Sessions, most recently updated first, paginated."""
        sessions = self.sessions.load()
        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return _page(sessions, limit, offset)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and every message that belongs to it.

        The messages file is rewritten before the sessions file; the two
        writes are not atomic together.
        """
        with self._lock:
            sessions = self.sessions.load()
            remaining_sessions = [s for s in sessions if s.id != session_id]
            if len(remaining_sessions) == len(sessions):
                return False

            messages = self.messages.load()
            remaining_messages = [m for m in messages if m.session_id != session_id]
            self.messages.save(remaining_messages)

            # Only the first matching session is removed, duplicates stay
            index = next(i for i, s in enumerate(sessions) if s.id == session_id)
            del sessions[index]
            self.sessions.save(sessions)

        logger.info(
            f"Deleted session {session_id} "
            f"({len(messages) - len(remaining_messages)} messages removed)"
        )
        return True

    # ------------------------------------------------------------------
    # Survey responses
    # ------------------------------------------------------------------

    def save_survey_response(
        self,
        message_id: str,
        rating: Rating,
        user_ip: str | None = None,
        user_agent: str | None = None,
    ) -> int:
        """Record a rating on the message and as a standalone response.

        The standalone response is stored even when no message matches.
        """
        with self._lock:
            if not self.update_chat_message_with_survey(message_id, rating):
                logger.warning(f"Survey for unknown message {message_id}, storing response only")

            responses = self.surveys.load()
            new_id = _next_id(responses, self.surveys.unparsed_ids())
            responses.append(
                SurveyResponse(
                    id=new_id,
                    message_id=message_id,
                    rating=rating,
                    created_at=self._now(),
                    user_ip=user_ip or UNKNOWN,
                    user_agent=user_agent or UNKNOWN,
                )
            )
            self.surveys.save(responses)

        return new_id

    def get_survey_responses(self, limit: int = 100, offset: int = 0) -> list[SurveyResponse]:
        """Survey responses, newest first, paginated."""
        responses = self.surveys.load()
        responses.sort(key=lambda r: r.created_at, reverse=True)
        return _page(responses, limit, offset)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_survey_stats(self) -> SurveyStats:
        return survey_stats(self.surveys.load(), self._clock())

    def get_chat_stats(self) -> ChatStats:
        return chat_stats(self.messages.load(), self._clock())
