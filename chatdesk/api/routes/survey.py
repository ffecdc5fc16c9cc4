"""Satisfaction survey endpoint."""

from fastapi import APIRouter, Depends
from pydantic import Field

from chatdesk.api.deps import ClientInfo, get_client_info, get_record_store
from chatdesk.api.schemas import ApiModel
from chatdesk.storage import Rating
from chatdesk.storage.record_store import RecordStore

router = APIRouter()


class SurveyInput(ApiModel):
    """Rating of one assistant message."""

    message_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="message_id of the rated assistant message",
    )
    rating: Rating = Field(
        ...,
        description="'good' or 'bad'",
    )


class SurveySaved(ApiModel):
    success: bool = True
    response_id: int


@router.post("", response_model=SurveySaved)
def submit_survey(
    data: SurveyInput,
    client: ClientInfo = Depends(get_client_info),
    store: RecordStore = Depends(get_record_store),
) -> SurveySaved:
    """Record a rating on the message and in the survey log."""
    response_id = store.save_survey_response(
        data.message_id,
        data.rating,
        user_ip=client.ip,
        user_agent=client.user_agent,
    )
    return SurveySaved(response_id=response_id)
