from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from interview_agenda.core.config import settings
from interview_agenda.models.schedule import InterviewSlot
from interview_agenda.services.availability_service import (
    AvailabilityRules,
    Weekday,
    is_slot_within_availability,
)
from interview_agenda.services.block_service import find_blocks_by_instants
from interview_agenda.services.reservation_service import find_reservations_by_instants
from interview_agenda.services.slot_service import (
    build_slot_from_local,
    local_at,
    resolve_now,
    to_naive_utc,
)

# Raw candidates generated per requested alternative, and the prefix checked against storage.
CANDIDATES_PER_RESULT = 20
LOOKUP_PER_RESULT = 10


def generate_candidate_starts(
    rules: AvailabilityRules, now: datetime, limit: int, search_days: int
) -> list[datetime]:
    """Open local slot starts after `now`, ascending and without duplicate instants.

    Stops adding days once limit * CANDIDATES_PER_RESULT starts have been collected.
    """
    tz = rules.tzinfo
    now_utc = resolve_now(now)
    now_local = now_utc.astimezone(tz)
    today = now_local.date()
    candidates: list[datetime] = []
    for offset in range(search_days):
        if len(candidates) >= limit * CANDIDATES_PER_RESULT:
            break
        day = today + timedelta(days=offset)
        intervals = rules.weekly.get(Weekday(day.isoweekday()), ())
        if not intervals or day.isoformat() in rules.exception_dates:
            continue
        for interval in intervals:
            last_start = interval.end_minutes - rules.slot_minutes
            for start_minutes in range(interval.start_minutes, last_start + 1, rules.slot_minutes):
                start = local_at(day, start_minutes, tz)
                if start.astimezone(UTC) > now_utc:
                    candidates.append(start)

    candidates.sort(key=lambda dt: dt.astimezone(UTC))
    unique: list[datetime] = []
    for dt in candidates:
        if unique and dt.astimezone(UTC) == unique[-1].astimezone(UTC):
            continue
        unique.append(dt)
    return unique


async def find_busy_instants(
    session: AsyncSession, instants: list[datetime], location: str
) -> set[datetime]:
    """Naive UTC starts taken by an active reservation or a block at `location`."""
    reservations = await find_reservations_by_instants(session, instants, location)
    blocks = await find_blocks_by_instants(session, instants, location)
    return {row.start_at for row in reservations} | {row.start_at for row in blocks}


async def suggest_alternatives(
    session: AsyncSession,
    rules: AvailabilityRules,
    location: str,
    now: datetime | None = None,
    limit: int | None = None,
    search_days: int | None = None,
) -> list[InterviewSlot]:
    limit = settings.alternatives_limit if limit is None else limit
    search_days = settings.alternatives_search_days if search_days is None else search_days
    if limit <= 0 or search_days <= 0:
        return []

    # Candidates past the prefix checked against storage are never emitted.
    candidates = generate_candidate_starts(rules, resolve_now(now), limit, search_days)
    candidates = candidates[: limit * LOOKUP_PER_RESULT]
    busy = await find_busy_instants(session, [c.astimezone(UTC) for c in candidates], location)

    alternatives: list[InterviewSlot] = []
    for candidate in candidates:
        if len(alternatives) >= limit:
            break
        if to_naive_utc(candidate) in busy:
            continue
        if not is_slot_within_availability(
            candidate, rules.slot_minutes, rules.weekly, rules.exception_dates
        ):
            continue
        alternatives.append(
            build_slot_from_local(candidate, rules.slot_minutes, location, rules.timezone)
        )
    return alternatives
