from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from interview_agenda.models.scheduling_config import (
    SchedulingConfig,
    SchedulingConfigPublic,
    SchedulingConfigUpdate,
)


async def get_scheduling_config(session: AsyncSession, workspace_id: str) -> SchedulingConfig:
    """Stored config for the workspace, or an unsaved blank one (all defaults)."""
    result = await session.execute(
        select(SchedulingConfig).where(SchedulingConfig.workspace_id == workspace_id)
    )
    config = result.scalar_one_or_none()
    if config is None:
        return SchedulingConfig(workspace_id=workspace_id)
    return config


async def update_scheduling_config(
    session: AsyncSession, workspace_id: str, data: SchedulingConfigUpdate
) -> SchedulingConfig:
    result = await session.execute(
        select(SchedulingConfig).where(SchedulingConfig.workspace_id == workspace_id)
    )
    config = result.scalar_one_or_none() or SchedulingConfig(workspace_id=workspace_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if isinstance(value, str):
            value = value.strip() or None
        setattr(config, field, value)
    config.updated_at = datetime.now(UTC).replace(tzinfo=None)
    session.add(config)
    await session.flush()
    await session.refresh(config)
    return config


def config_to_public(config: SchedulingConfig) -> SchedulingConfigPublic:
    return SchedulingConfigPublic(
        workspace_id=config.workspace_id,
        interview_timezone=config.interview_timezone,
        interview_slot_minutes=config.interview_slot_minutes,
        interview_weekly_availability=config.interview_weekly_availability,
        interview_exceptions=config.interview_exceptions,
        interview_locations=config.interview_locations,
        default_interview_location=config.default_interview_location,
    )
