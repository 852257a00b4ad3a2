"""Reservation transactions: booking, rescheduling, confirming and releasing a conversation's interview.

Every expected failure comes back as a ScheduleFailure carrying alternatives.
The single storage error handled here is the unique violation raised when a
concurrent booking wins the same slot (or the same conversation) first; any
other database error, other IntegrityErrors included, propagates to the caller.
"""
import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from interview_agenda.core.db import is_unique_violation
from interview_agenda.models.reservation import RELEASE_STATUSES, ReservationStatus
from interview_agenda.models.schedule import (
    FailureReason,
    InterviewSlot,
    ReservationUpdate,
    ScheduleAttemptResult,
    ScheduleFailure,
    ScheduleKind,
    ScheduleSuccess,
)
from interview_agenda.models.scheduling_config import SchedulingConfigBase
from interview_agenda.services.alternatives_service import suggest_alternatives
from interview_agenda.services.availability_service import (
    AvailabilityRules,
    format_exact_address,
    is_slot_within_availability,
    load_availability_rules,
    normalize_location,
    parse_time_to_minutes,
)
from interview_agenda.services.block_service import find_block
from interview_agenda.services.reservation_service import (
    create_reservation,
    find_active_by_conversation,
    update_reservation,
)
from interview_agenda.services.slot_service import (
    BAD_DAY_MESSAGE,
    BAD_TIME_MESSAGE,
    OUTSIDE_AVAILABILITY_MESSAGE,
    build_slot_from_local,
    compute_next_occurrence,
    day_to_weekday,
    resolve_now,
    to_naive_utc,
)

logger = logging.getLogger(__name__)

MISSING_MESSAGE = 'Falta día u hora para agendar. Indica por ejemplo: "martes 13:00".'
CONFLICT_MESSAGE = "Ese horario ya está ocupado."


async def _failure(
    session: AsyncSession,
    rules: AvailabilityRules,
    location: str,
    now: datetime,
    reason: FailureReason,
    message: str,
) -> ScheduleFailure:
    alternatives = await suggest_alternatives(session, rules, location, now=now)
    logger.info(
        "Schedule attempt failed: reason=%s location=%s alternatives=%d",
        reason, location, len(alternatives),
    )
    return ScheduleFailure(reason=reason, message=message, alternatives=alternatives)


async def _commit_reservation(
    session: AsyncSession,
    conversation_id: str,
    contact_id: str,
    slot: InterviewSlot,
) -> ScheduleSuccess:
    existing = await find_active_by_conversation(session, conversation_id)
    if (
        existing
        and existing.location == slot.location
        and existing.start_at == to_naive_utc(slot.start_at)
    ):
        await update_reservation(
            session,
            existing,
            status=ReservationStatus.PENDING,
            end_at=slot.end_at,
            timezone=slot.timezone,
        )
        return ScheduleSuccess(
            kind=ScheduleKind.UNCHANGED,
            slot=slot,
            reservation_id=existing.id,
            previous_reservation_id=existing.id,
        )

    # Demote first: the store allows only one active row per conversation.
    previous_id = None
    if existing:
        previous_id = existing.id
        await update_reservation(
            session, existing, status=ReservationStatus.RESCHEDULED, active_key=None
        )

    created = await create_reservation(
        session,
        conversation_id=conversation_id,
        contact_id=contact_id,
        start_at=slot.start_at,
        end_at=slot.end_at,
        timezone=slot.timezone,
        location=slot.location,
    )
    return ScheduleSuccess(
        kind=ScheduleKind.RESCHEDULED if previous_id else ScheduleKind.SCHEDULED,
        slot=slot,
        reservation_id=created.id,
        previous_reservation_id=previous_id,
    )


async def attempt_schedule_interview(
    session: AsyncSession,
    *,
    conversation_id: str,
    contact_id: str,
    day: str | None,
    time: str | None,
    location: str | None,
    config: SchedulingConfigBase,
    now: datetime | None = None,
) -> ScheduleAttemptResult:
    """Book, reschedule or re-confirm the conversation's interview at `day` `time`.

    The reservation reads and writes share the session's transaction. On a lost
    race the session is rolled back before alternatives are computed.
    """
    rules = load_availability_rules(config)
    now_utc = resolve_now(now)
    requested_location = normalize_location(location) or rules.default_location

    if not (day or "").strip() or not (time or "").strip():
        return await _failure(
            session, rules, requested_location, now_utc, FailureReason.MISSING, MISSING_MESSAGE
        )

    weekday = day_to_weekday(day)
    if weekday is None:
        return await _failure(
            session, rules, requested_location, now_utc, FailureReason.BAD_INPUT, BAD_DAY_MESSAGE
        )
    time_minutes = parse_time_to_minutes(time)
    if time_minutes is None:
        return await _failure(
            session, rules, requested_location, now_utc, FailureReason.BAD_INPUT, BAD_TIME_MESSAGE
        )

    start_local = compute_next_occurrence(now_utc.astimezone(rules.tzinfo), weekday, time_minutes)
    if not is_slot_within_availability(
        start_local, rules.slot_minutes, rules.weekly, rules.exception_dates
    ):
        return await _failure(
            session,
            rules,
            requested_location,
            now_utc,
            FailureReason.OUTSIDE_AVAILABILITY,
            OUTSIDE_AVAILABILITY_MESSAGE,
        )

    slot = build_slot_from_local(start_local, rules.slot_minutes, requested_location, rules.timezone)

    if await find_block(session, slot.start_at, slot.location):
        return await _failure(
            session, rules, requested_location, now_utc, FailureReason.CONFLICT, CONFLICT_MESSAGE
        )

    try:
        result = await _commit_reservation(session, conversation_id, contact_id, slot)
    except IntegrityError as exc:
        if not is_unique_violation(exc):
            raise
        await session.rollback()
        logger.warning(
            "Lost booking race: conversation=%s start_at=%s location=%s",
            conversation_id, slot.start_at.isoformat(), slot.location,
        )
        return await _failure(
            session, rules, requested_location, now_utc, FailureReason.CONFLICT, CONFLICT_MESSAGE
        )

    result.exact_address = format_exact_address(config, slot.location)
    logger.info(
        "Interview %s: conversation=%s reservation=%s start_at=%s location=%s",
        result.kind, conversation_id, result.reservation_id, slot.start_at.isoformat(), slot.location,
    )
    return result


async def release_active_reservation(
    session: AsyncSession, conversation_id: str, status: ReservationStatus
) -> ReservationUpdate:
    """Cancel or hold the active reservation, freeing the conversation to book again."""
    if status not in RELEASE_STATUSES:
        raise ValueError(f"Release status must be CANCELLED or ON_HOLD, got {status!r}")
    existing = await find_active_by_conversation(session, conversation_id)
    if not existing:
        return ReservationUpdate(updated=False)
    await update_reservation(session, existing, status=status, active_key=None)
    logger.info("Reservation %s released as %s", existing.id, status)
    return ReservationUpdate(updated=True, reservation_id=existing.id)


async def confirm_active_reservation(
    session: AsyncSession, conversation_id: str
) -> ReservationUpdate:
    # TODO: product review pending on whether a confirmed interview may still be
    # demoted by a later attempt; the reservation stays active for now.
    existing = await find_active_by_conversation(session, conversation_id)
    if not existing:
        return ReservationUpdate(updated=False)
    await update_reservation(session, existing, status=ReservationStatus.CONFIRMED)
    logger.info("Reservation %s confirmed", existing.id)
    return ReservationUpdate(updated=True, reservation_id=existing.id)
