from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from interview_agenda.models.reservation import (
    ACTIVE_KEY,
    InterviewReservation,
    ReservationPublic,
    ReservationStatus,
)
from interview_agenda.services.slot_service import to_naive_utc

# Sentinel for "leave this column alone" in update_reservation.
_UNSET = object()


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


async def find_active_by_conversation(
    session: AsyncSession, conversation_id: str
) -> InterviewReservation | None:
    result = await session.execute(
        select(InterviewReservation)
        .where(
            InterviewReservation.conversation_id == conversation_id,
            InterviewReservation.active_key == ACTIVE_KEY,
        )
        .order_by(InterviewReservation.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_reservation(
    session: AsyncSession,
    *,
    conversation_id: str,
    contact_id: str,
    start_at: datetime,
    end_at: datetime,
    timezone: str,
    location: str,
) -> InterviewReservation:
    """Insert a new PENDING, active reservation.

    The flush surfaces sqlalchemy IntegrityError when the instant/location or
    the conversation already has a live reservation.
    """
    reservation = InterviewReservation(
        conversation_id=conversation_id,
        contact_id=contact_id,
        start_at=to_naive_utc(start_at),
        end_at=to_naive_utc(end_at),
        timezone=timezone,
        location=location,
        status=ReservationStatus.PENDING,
        active_key=ACTIVE_KEY,
    )
    session.add(reservation)
    await session.flush()
    return reservation


async def update_reservation(
    session: AsyncSession,
    reservation: InterviewReservation,
    *,
    status: ReservationStatus | None = None,
    active_key: str | None | object = _UNSET,
    end_at: datetime | None = None,
    timezone: str | None = None,
) -> InterviewReservation:
    if status is not None:
        reservation.status = status
    if active_key is not _UNSET:
        reservation.active_key = active_key
    if end_at is not None:
        reservation.end_at = to_naive_utc(end_at)
    if timezone is not None:
        reservation.timezone = timezone
    reservation.updated_at = _utc_naive_now()
    session.add(reservation)
    await session.flush()
    return reservation


async def find_reservations_by_instants(
    session: AsyncSession, instants: Sequence[datetime], location: str
) -> list[InterviewReservation]:
    """Active reservations at any of `instants` for `location`, in one query."""
    if not instants:
        return []
    result = await session.execute(
        select(InterviewReservation).where(
            InterviewReservation.start_at.in_([to_naive_utc(i) for i in instants]),
            InterviewReservation.location == location,
            InterviewReservation.active_key == ACTIVE_KEY,
        )
    )
    return list(result.scalars().all())


async def list_reservations(
    session: AsyncSession,
    start_inclusive: datetime,
    end_exclusive: datetime,
    include_inactive: bool = False,
) -> list[InterviewReservation]:
    q = (
        select(InterviewReservation)
        .where(
            InterviewReservation.start_at >= to_naive_utc(start_inclusive),
            InterviewReservation.start_at < to_naive_utc(end_exclusive),
        )
        .order_by(InterviewReservation.start_at)
    )
    if not include_inactive:
        q = q.where(InterviewReservation.active_key == ACTIVE_KEY)
    result = await session.execute(q)
    return list(result.scalars().all())


def reservation_to_public(r: InterviewReservation) -> ReservationPublic:
    return ReservationPublic(
        id=r.id,
        conversation_id=r.conversation_id,
        contact_id=r.contact_id,
        start_at=r.start_at,
        end_at=r.end_at,
        timezone=r.timezone,
        location=r.location,
        status=r.status,
        active=r.is_active,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )
