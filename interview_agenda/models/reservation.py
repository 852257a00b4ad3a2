from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from sqlalchemy import DateTime, Index, UniqueConstraint, text
from sqlmodel import Field, SQLModel

# Sentinel carried by the single live reservation of a conversation.
ACTIVE_KEY = "ACTIVE"


class ReservationStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    RESCHEDULED = "RESCHEDULED"
    CANCELLED = "CANCELLED"
    ON_HOLD = "ON_HOLD"


RELEASE_STATUSES = frozenset({ReservationStatus.CANCELLED, ReservationStatus.ON_HOLD})


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def _new_id() -> str:
    return uuid4().hex


class InterviewReservation(SQLModel, table=True):
    __tablename__ = "interview_reservations"
    __table_args__ = (
        # Two live reservations can never share an instant/location; NULL keys never collide.
        UniqueConstraint(
            "start_at",
            "location",
            "active_key",
            name="uq_interview_reservations_start_at_location_active_key",
        ),
        # At most one live reservation per conversation.
        Index(
            "uq_interview_reservations_active_conversation",
            "conversation_id",
            unique=True,
            sqlite_where=text("active_key = 'ACTIVE'"),
            postgresql_where=text("active_key = 'ACTIVE'"),
        ),
    )

    id: str = Field(default_factory=_new_id, primary_key=True)
    conversation_id: str = Field(index=True)
    contact_id: str = Field(index=True)
    start_at: datetime = Field(sa_type=DateTime(), index=True)
    end_at: datetime = Field(sa_type=DateTime())
    timezone: str
    location: str
    status: str = Field(default=ReservationStatus.PENDING)
    active_key: str | None = Field(default=ACTIVE_KEY)
    created_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())

    @property
    def is_active(self) -> bool:
        return self.active_key == ACTIVE_KEY


class ReservationPublic(SQLModel):
    id: str
    conversation_id: str
    contact_id: str
    start_at: datetime
    end_at: datetime
    timezone: str
    location: str
    status: str
    active: bool
    created_at: datetime
    updated_at: datetime
