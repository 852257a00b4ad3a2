from interview_agenda.models.reservation import (
    ACTIVE_KEY,
    InterviewReservation,
    ReservationPublic,
    ReservationStatus,
)
from interview_agenda.models.schedule import (
    FailureReason,
    InterviewLocationConfig,
    InterviewSlot,
    ReservationUpdate,
    ScheduleAttemptResult,
    ScheduleFailure,
    ScheduleKind,
    ScheduleSuccess,
    SlotResolution,
)
from interview_agenda.models.scheduling_config import (
    SchedulingConfig,
    SchedulingConfigPublic,
    SchedulingConfigUpdate,
)
from interview_agenda.models.slot_block import InterviewSlotBlock, SlotBlockCreate, SlotBlockPublic

__all__ = [
    "ACTIVE_KEY",
    "InterviewReservation",
    "ReservationPublic",
    "ReservationStatus",
    "FailureReason",
    "InterviewLocationConfig",
    "InterviewSlot",
    "ReservationUpdate",
    "ScheduleAttemptResult",
    "ScheduleFailure",
    "ScheduleKind",
    "ScheduleSuccess",
    "SlotResolution",
    "SchedulingConfig",
    "SchedulingConfigPublic",
    "SchedulingConfigUpdate",
    "InterviewSlotBlock",
    "SlotBlockCreate",
    "SlotBlockPublic",
]
