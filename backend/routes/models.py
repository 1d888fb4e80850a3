"""Pydantic request models for API endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from plivetv.feed import Observation


class ObservationBatch(BaseModel):
    entries: list[Observation]


class ItemEvent(BaseModel):
    type: Literal["load_start", "metadata", "ready", "time_update", "autoplay_blocked"]
    current_time: float | None = None
    duration: float | None = None


class SeekBody(BaseModel):
    percent: float = Field(ge=0, le=100)


class MuteBody(BaseModel):
    muted: bool | None = None  # None toggles


class ChatBody(BaseModel):
    message: str
