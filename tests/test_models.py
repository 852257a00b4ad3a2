from datetime import datetime

import pytest
from sqlalchemy import DateTime, select

from interview_agenda.models import InterviewReservation, InterviewSlotBlock, SchedulingConfig


@pytest.mark.parametrize(
    "table, column",
    [
        (InterviewReservation, "start_at"),
        (InterviewReservation, "end_at"),
        (InterviewReservation, "created_at"),
        (InterviewReservation, "updated_at"),
        (InterviewSlotBlock, "start_at"),
        (InterviewSlotBlock, "end_at"),
        (InterviewSlotBlock, "archived_at"),
        (InterviewSlotBlock, "created_at"),
        (InterviewSlotBlock, "updated_at"),
        (SchedulingConfig, "updated_at"),
    ],
)
def test_timestamps_are_naive_utc_columns(table, column):
    col_type = table.__table__.c[column].type
    assert type(col_type) is DateTime
    assert col_type.timezone is False


async def test_naive_timestamps_round_trip(session):
    start = datetime(2026, 10, 20, 13, 0)
    session.add(
        InterviewSlotBlock(
            start_at=start,
            end_at=datetime(2026, 10, 20, 13, 30),
            timezone="UTC",
            location="Online",
        )
    )
    await session.flush()
    result = await session.execute(select(InterviewSlotBlock).where(InterviewSlotBlock.start_at == start))
    block = result.scalar_one()
    assert block.start_at == start
    assert block.start_at.tzinfo is None
