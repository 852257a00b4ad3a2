from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from interview_agenda.api.deps import get_session, require_admin
from interview_agenda.core.security import Principal
from interview_agenda.models.scheduling_config import SchedulingConfigPublic, SchedulingConfigUpdate
from interview_agenda.services.config_service import (
    config_to_public,
    get_scheduling_config,
    update_scheduling_config,
)

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/scheduling", response_model=SchedulingConfigPublic)
async def read_scheduling_config(
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SchedulingConfigPublic:
    config = await get_scheduling_config(session, principal.workspace_id)
    return config_to_public(config)


@router.put("/scheduling", response_model=SchedulingConfigPublic)
async def write_scheduling_config(
    body: SchedulingConfigUpdate,
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SchedulingConfigPublic:
    """Store raw values; they are sanitized on every read, never rejected here."""
    config = await update_scheduling_config(session, principal.workspace_id, body)
    return config_to_public(config)
