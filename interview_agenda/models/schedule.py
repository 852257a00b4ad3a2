from datetime import datetime
from enum import StrEnum
from typing import Literal

from sqlmodel import Field, SQLModel


class ScheduleKind(StrEnum):
    SCHEDULED = "SCHEDULED"
    RESCHEDULED = "RESCHEDULED"
    UNCHANGED = "UNCHANGED"


class FailureReason(StrEnum):
    MISSING = "MISSING"
    BAD_INPUT = "BAD_INPUT"
    OUTSIDE_AVAILABILITY = "OUTSIDE_AVAILABILITY"
    CONFLICT = "CONFLICT"


class InterviewLocationConfig(SQLModel):
    label: str
    exact_address: str | None = None
    instructions: str | None = None


class InterviewSlot(SQLModel):
    """A concrete interview window; start_at/end_at are aware UTC instants."""

    day: str
    time: str
    location: str
    timezone: str
    start_at: datetime
    end_at: datetime


class ScheduleSuccess(SQLModel):
    ok: Literal[True] = True
    kind: ScheduleKind
    slot: InterviewSlot
    reservation_id: str
    previous_reservation_id: str | None = None
    exact_address: str | None = None  # "Dirección exacta: ..." block for the confirmation reply


class ScheduleFailure(SQLModel):
    ok: Literal[False] = False
    reason: FailureReason
    message: str
    alternatives: list[InterviewSlot] = Field(default_factory=list)


# Tagged on `ok`; callers branch on the flag, not on the type.
ScheduleAttemptResult = ScheduleSuccess | ScheduleFailure


class SlotResolution(SQLModel):
    ok: bool
    slot: InterviewSlot | None = None
    reason: FailureReason | None = None
    message: str | None = None
    exact_address: str | None = None


class ReservationUpdate(SQLModel):
    updated: bool
    reservation_id: str | None = None
