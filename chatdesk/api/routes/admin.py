"""Admin dashboard endpoints: history listings and statistics."""

from fastapi import APIRouter, Depends, Query

from chatdesk.api.deps import get_record_store
from chatdesk.api.schemas import ApiModel, Pagination
from chatdesk.services.statistics import ChatStats, SurveyStats
from chatdesk.storage import ChatMessage, SurveyResponse
from chatdesk.storage.record_store import RecordStore

router = APIRouter()


class ChatMessagesResponse(ApiModel):
    success: bool = True
    messages: list[ChatMessage]
    pagination: Pagination


class SurveyResponsesResponse(ApiModel):
    success: bool = True
    responses: list[SurveyResponse]
    pagination: Pagination


class ChatStatsResponse(ChatStats):
    success: bool = True


class SurveyStatsResponse(SurveyStats):
    success: bool = True


@router.get("/chat-messages", response_model=ChatMessagesResponse)
def list_chat_messages(
    limit: int = Query(
        default=100,
        ge=1,
        le=1000,
        description="Maximum number of messages to return",
    ),
    offset: int = Query(
        default=0,
        ge=0,
        description="Offset for pagination",
    ),
    store: RecordStore = Depends(get_record_store),
) -> ChatMessagesResponse:
    """All chat messages, newest first."""
    messages = store.get_chat_messages(limit, offset)
    return ChatMessagesResponse(
        messages=messages,
        pagination=Pagination(limit=limit, offset=offset, total=len(messages)),
    )


@router.get("/chat-stats", response_model=ChatStatsResponse)
def get_chat_stats(store: RecordStore = Depends(get_record_store)) -> ChatStatsResponse:
    """Message counts, survey coverage and 30-day activity."""
    stats = store.get_chat_stats()
    return ChatStatsResponse(**stats.model_dump())


@router.get("/survey-responses", response_model=SurveyResponsesResponse)
def list_survey_responses(
    limit: int = Query(
        default=100,
        ge=1,
        le=1000,
        description="Maximum number of responses to return",
    ),
    offset: int = Query(
        default=0,
        ge=0,
        description="Offset for pagination",
    ),
    store: RecordStore = Depends(get_record_store),
) -> SurveyResponsesResponse:
    """All survey responses, newest first."""
    responses = store.get_survey_responses(limit, offset)
    return SurveyResponsesResponse(
        responses=responses,
        pagination=Pagination(limit=limit, offset=offset, total=len(responses)),
    )


@router.get("/survey-stats", response_model=SurveyStatsResponse)
def get_survey_stats(store: RecordStore = Depends(get_record_store)) -> SurveyStatsResponse:
    """Rating totals and 30-day breakdown."""
    stats = store.get_survey_stats()
    return SurveyStatsResponse(**stats.model_dump())
