from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class InterviewSlotBlock(SQLModel, table=True):
    """Admin blackout for one instant/location, independent of the weekly template."""

    __tablename__ = "interview_slot_blocks"
    __table_args__ = (
        UniqueConstraint("start_at", "location", name="uq_interview_slot_blocks_start_at_location"),
    )

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    start_at: datetime = Field(sa_type=DateTime(), index=True)
    end_at: datetime = Field(sa_type=DateTime())
    timezone: str
    location: str
    reason: str | None = None
    tag: str | None = Field(default=None, index=True)
    archived_at: datetime | None = Field(default=None, sa_type=DateTime(), index=True)  # soft delete
    created_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())


class SlotBlockCreate(SQLModel):
    start_at: datetime
    location: str | None = None
    reason: str | None = None
    tag: str | None = None


class SlotBlockPublic(SQLModel):
    id: str
    start_at: datetime
    end_at: datetime
    timezone: str
    location: str
    reason: str | None = None
    tag: str | None = None
    archived_at: datetime | None = None
    created_at: datetime
