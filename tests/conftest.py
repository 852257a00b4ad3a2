from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from interview_agenda.models import InterviewReservation, InterviewSlotBlock, SchedulingConfig  # noqa: F401

# Monday 2026-10-19, 15:00 UTC
NOW = datetime(2026, 10, 19, 15, 0, tzinfo=UTC)


def make_config(**overrides) -> SchedulingConfig:
    values = {"workspace_id": "test", "interview_timezone": "UTC"}
    values.update(overrides)
    return SchedulingConfig(**values)


@pytest.fixture
def utc_config() -> SchedulingConfig:
    return make_config()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def run(session_maker):
    """Run a service call in its own committed session, like one API request."""

    async def _run(fn, *args, **kwargs):
        async with session_maker() as session:
            result = await fn(session, *args, **kwargs)
            await session.commit()
            return result

    return _run
