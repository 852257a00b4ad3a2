from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from interview_agenda.models.reservation import ReservationPublic
from interview_agenda.models.schedule import InterviewSlot


class ScheduleRequest(BaseModel):
    conversation_id: str
    contact_id: str
    day: str | None = None
    time: str | None = None
    location: str | None = None


class ReleaseRequest(BaseModel):
    status: Literal["CANCELLED", "ON_HOLD"]


class AlternativesResponse(BaseModel):
    timezone: str
    slot_minutes: int
    location: str
    alternatives: list[InterviewSlot]
    text: str  # human-readable list for chat replies


class AgendaResponse(BaseModel):
    timezone: str
    slot_minutes: int
    start: datetime
    end: datetime
    include_inactive: bool
    reservations: list[ReservationPublic]
