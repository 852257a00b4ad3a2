from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class SchedulingConfigBase(SQLModel):
    # Raw values as the CRM stores them; sanitized on every read.
    interview_timezone: str | None = None
    interview_slot_minutes: int | None = None
    interview_weekly_availability: str | None = None  # JSON object keyed by weekday name
    interview_exceptions: str | None = None  # JSON array of YYYY-MM-DD strings or {"date": ...}
    interview_locations: str | None = None  # JSON array of labels or {label, exactAddress, instructions}
    default_interview_location: str | None = None


class SchedulingConfig(SchedulingConfigBase, table=True):
    __tablename__ = "scheduling_configs"
    id: int | None = Field(default=None, primary_key=True)
    workspace_id: str = Field(unique=True, index=True)
    updated_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())


class SchedulingConfigUpdate(SchedulingConfigBase):
    pass


class SchedulingConfigPublic(SchedulingConfigBase):
    workspace_id: str
