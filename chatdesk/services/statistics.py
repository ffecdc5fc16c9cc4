"""Aggregate statistics over stored chat messages and survey responses."""

from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chatdesk.storage.models import ChatMessage, SurveyResponse

# Length of the trailing window used for the ``daily`` breakdowns
DAILY_WINDOW_DAYS = 30


class StatsModel(BaseModel):
    """Stats payloads use camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DailyRatingCount(StatsModel):
    date: str
    rating: str
    count: int


class DailyRoleCount(StatsModel):
    date: str
    role: str
    count: int


class SurveyStats(StatsModel):
    """Survey response totals."""

    total: int
    ratings: dict[str, int] = Field(default_factory=dict)
    daily: list[DailyRatingCount] = Field(default_factory=list)


class ChatStats(StatsModel):
    """Chat message totals and survey coverage of assistant replies."""

    total: int
    user_messages: int
    assistant_messages: int
    survey_responses: int
    good_ratings: int
    bad_ratings: int
    survey_response_rate: float
    daily: list[DailyRoleCount] = Field(default_factory=list)


def window_start(now: datetime, days: int = DAILY_WINDOW_DAYS) -> datetime:
    """Inclusive lower bound of the trailing window ending at ``now``."""
    return now - timedelta(days=days)


def daily_counts(
    rows: Iterable[tuple[datetime, str]],
    now: datetime,
    days: int = DAILY_WINDOW_DAYS,
) -> list[tuple[str, str, int]]:
    """Count ``(timestamp, key)`` pairs per UTC calendar date and key.

    Rows older than ``now - days`` are dropped; a row exactly on the boundary
    is kept. Output is newest date first, keys ascending within a date.
    """
    since = window_start(now, days)
    counts: Counter[tuple[str, str]] = Counter(
        (created_at.date().isoformat(), key)
        for created_at, key in rows
        if created_at >= since
    )
    ordered = sorted(counts.items(), key=lambda item: item[0][1])
    ordered.sort(key=lambda item: item[0][0], reverse=True)
    return [(date, key, count) for (date, key), count in ordered]


def response_rate(responded: int, eligible: int) -> float:
    """Percentage of ``eligible`` that ``responded``, one decimal place."""
    if eligible == 0:
        return 0.0
    rate = Decimal(str(responded / eligible * 100))
    return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def survey_stats(responses: list[SurveyResponse], now: datetime) -> SurveyStats:
    ratings = Counter(response.rating for response in responses)
    daily = daily_counts(((r.created_at, r.rating) for r in responses), now)
    return SurveyStats(
        total=len(responses),
        ratings=dict(ratings),
        daily=[DailyRatingCount(date=d, rating=k, count=c) for d, k, c in daily],
    )


def chat_stats(messages: list[ChatMessage], now: datetime) -> ChatStats:
    assistant = [m for m in messages if m.role == "assistant"]
    rated = [m for m in assistant if m.survey_rating]
    good = sum(1 for m in rated if m.survey_rating == "good")
    bad = sum(1 for m in rated if m.survey_rating == "bad")
    daily = daily_counts(((m.created_at, m.role) for m in messages), now)

    return ChatStats(
        total=len(messages),
        user_messages=sum(1 for m in messages if m.role == "user"),
        assistant_messages=len(assistant),
        survey_responses=len(rated),
        good_ratings=good,
        bad_ratings=bad,
        survey_response_rate=response_rate(len(rated), len(assistant)),
        daily=[DailyRoleCount(date=d, role=k, count=c) for d, k, c in daily],
    )
