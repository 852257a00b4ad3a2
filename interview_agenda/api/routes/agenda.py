import logging
from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from interview_agenda.api.deps import get_session, get_workspace_config, require_admin
from interview_agenda.api.schemas.agenda import (
    AgendaResponse,
    AlternativesResponse,
    ReleaseRequest,
    ScheduleRequest,
)
from interview_agenda.core.config import settings
from interview_agenda.core.db import is_unique_violation
from interview_agenda.models.reservation import ReservationStatus
from interview_agenda.models.schedule import (
    ReservationUpdate,
    ScheduleAttemptResult,
    SlotResolution,
)
from interview_agenda.models.scheduling_config import SchedulingConfig
from interview_agenda.models.slot_block import SlotBlockCreate, SlotBlockPublic
from interview_agenda.services.alternatives_service import suggest_alternatives
from interview_agenda.services.availability_service import load_availability_rules, normalize_location
from interview_agenda.services.block_service import (
    archive_block,
    block_to_public,
    create_block,
    list_blocks,
)
from interview_agenda.services.reservation_service import list_reservations, reservation_to_public
from interview_agenda.services.scheduler_service import (
    attempt_schedule_interview,
    confirm_active_reservation,
    release_active_reservation,
)
from interview_agenda.services.slot_service import format_alternatives_human, resolve_slot_from_day_time

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/agenda", tags=["agenda"], dependencies=[Depends(require_admin)])


@router.post("/schedule", response_model=ScheduleAttemptResult)
async def schedule_interview(
    body: ScheduleRequest,
    session: AsyncSession = Depends(get_session),
    config: SchedulingConfig = Depends(get_workspace_config),
) -> ScheduleAttemptResult:
    """Book or move the conversation's interview. Expected failures return 200 with ok=false."""
    return await attempt_schedule_interview(
        session,
        conversation_id=body.conversation_id,
        contact_id=body.contact_id,
        day=body.day,
        time=body.time,
        location=body.location,
        config=config,
    )


@router.get("/slot", response_model=SlotResolution)
async def preview_slot(
    day: str = Query(...),
    time: str = Query(...),
    location: str | None = Query(None),
    config: SchedulingConfig = Depends(get_workspace_config),
) -> SlotResolution:
    return resolve_slot_from_day_time(config, day, time, location)


@router.get("/alternatives", response_model=AlternativesResponse)
async def alternatives(
    location: str | None = Query(None),
    limit: int = Query(settings.alternatives_limit, ge=1, le=20),
    days: int = Query(settings.alternatives_search_days, ge=1, le=settings.agenda_max_days),
    session: AsyncSession = Depends(get_session),
    config: SchedulingConfig = Depends(get_workspace_config),
) -> AlternativesResponse:
    rules = load_availability_rules(config)
    loc = normalize_location(location) or rules.default_location
    slots = await suggest_alternatives(session, rules, loc, limit=limit, search_days=days)
    return AlternativesResponse(
        timezone=rules.timezone,
        slot_minutes=rules.slot_minutes,
        location=loc,
        alternatives=slots,
        text=format_alternatives_human(slots),
    )


@router.post("/conversations/{conversation_id}/confirm", response_model=ReservationUpdate)
async def confirm_reservation(
    conversation_id: str,
    session: AsyncSession = Depends(get_session),
) -> ReservationUpdate:
    return await confirm_active_reservation(session, conversation_id)


@router.post("/conversations/{conversation_id}/release", response_model=ReservationUpdate)
async def release_reservation(
    conversation_id: str,
    body: ReleaseRequest,
    session: AsyncSession = Depends(get_session),
) -> ReservationUpdate:
    return await release_active_reservation(session, conversation_id, ReservationStatus(body.status))


@router.get("/reservations", response_model=AgendaResponse)
async def agenda(
    from_: datetime | None = Query(None, alias="from"),
    to: datetime | None = Query(None),
    days: int | None = Query(None),
    include_inactive: bool = Query(False),
    session: AsyncSession = Depends(get_session),
    config: SchedulingConfig = Depends(get_workspace_config),
) -> AgendaResponse:
    """List reservations in [from, to); defaults to the next agenda_default_days days."""
    if days is None or days <= 0 or days > settings.agenda_max_days:
        days = settings.agenda_default_days
    now = datetime.now(UTC)
    start = from_ or now
    end = to or now + timedelta(days=days)
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)
    rules = load_availability_rules(config)
    rows = await list_reservations(session, start, end, include_inactive=include_inactive)
    return AgendaResponse(
        timezone=rules.timezone,
        slot_minutes=rules.slot_minutes,
        start=start,
        end=end,
        include_inactive=include_inactive,
        reservations=[reservation_to_public(r) for r in rows],
    )


@router.get("/blocks", response_model=list[SlotBlockPublic])
async def get_blocks(
    from_: datetime | None = Query(None, alias="from"),
    to: datetime | None = Query(None),
    tag: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
) -> list[SlotBlockPublic]:
    rows = await list_blocks(session, from_, to, tag=tag)
    return [block_to_public(b) for b in rows]


@router.post("/blocks", response_model=SlotBlockPublic, status_code=status.HTTP_201_CREATED)
async def add_block(
    body: SlotBlockCreate,
    session: AsyncSession = Depends(get_session),
    config: SchedulingConfig = Depends(get_workspace_config),
) -> SlotBlockPublic:
    rules = load_availability_rules(config)
    try:
        block = await create_block(session, rules, body)
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="That slot is already blocked for this location",
        ) from e
    logger.info("Slot block %s created at %s (%s)", block.id, block.start_at, block.location)
    return block_to_public(block)


@router.delete("/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_block(
    block_id: str,
    session: AsyncSession = Depends(get_session),
) -> None:
    ok = await archive_block(session, block_id)
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Block not found or already archived",
        )
