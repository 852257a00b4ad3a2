from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from interview_agenda.models.schedule import FailureReason, InterviewSlot, SlotResolution
from interview_agenda.models.scheduling_config import SchedulingConfigBase
from interview_agenda.services.availability_service import (
    WEEKDAY_LABELS,
    Weekday,
    format_exact_address,
    is_slot_within_availability,
    load_availability_rules,
    lookup_weekday,
    normalize_location,
    parse_time_to_minutes,
)

BAD_DAY_MESSAGE = "No pude interpretar el día. Usa un día de la semana (ej: martes)."
BAD_TIME_MESSAGE = "No pude interpretar la hora. Usa formato HH:mm (ej: 13:00)."
OUTSIDE_AVAILABILITY_MESSAGE = "Ese horario está fuera de la disponibilidad configurada."


def resolve_now(now: datetime | None = None) -> datetime:
    """Aware UTC "now"; naive values are taken as UTC."""
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert to naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def day_to_weekday(day: str | None) -> Weekday | None:
    return lookup_weekday(day)


def local_at(day: date, minutes: int, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time(minutes // 60, minutes % 60), tzinfo=tz)


def compute_next_occurrence(now: datetime, weekday: Weekday, time_minutes: int) -> datetime:
    """Next local instant on `weekday` at `time_minutes` strictly after `now`.

    `now` must be aware and in the tenant timezone. A same-day time that has
    already passed rolls forward a full week, never to the next day.
    """
    today = now.date()
    diff = (weekday - today.isoweekday() + 7) % 7
    target = local_at(today + timedelta(days=diff), time_minutes, now.tzinfo)
    if target.astimezone(UTC) <= now.astimezone(UTC):
        target = local_at(today + timedelta(days=diff + 7), time_minutes, now.tzinfo)
    return target


def build_slot_from_local(
    start_local: datetime, slot_minutes: int, location: str, timezone: str
) -> InterviewSlot:
    start_at = start_local.astimezone(UTC)
    return InterviewSlot(
        day=WEEKDAY_LABELS[Weekday(start_local.isoweekday())],
        time=start_local.strftime("%H:%M"),
        location=location,
        timezone=timezone,
        start_at=start_at,
        end_at=start_at + timedelta(minutes=slot_minutes),
    )


def resolve_slot_from_day_time(
    config: SchedulingConfigBase,
    day: str,
    time_text: str,
    location: str | None = None,
    now: datetime | None = None,
) -> SlotResolution:
    """Resolve and validate a day/time against the template without touching storage."""
    rules = load_availability_rules(config)
    requested_location = normalize_location(location) or rules.default_location

    weekday = day_to_weekday(day)
    if weekday is None:
        return SlotResolution(ok=False, reason=FailureReason.BAD_INPUT, message=BAD_DAY_MESSAGE)
    time_minutes = parse_time_to_minutes(time_text)
    if time_minutes is None:
        return SlotResolution(ok=False, reason=FailureReason.BAD_INPUT, message=BAD_TIME_MESSAGE)

    now_local = resolve_now(now).astimezone(rules.tzinfo)
    start_local = compute_next_occurrence(now_local, weekday, time_minutes)
    if not is_slot_within_availability(
        start_local, rules.slot_minutes, rules.weekly, rules.exception_dates
    ):
        return SlotResolution(
            ok=False,
            reason=FailureReason.OUTSIDE_AVAILABILITY,
            message=OUTSIDE_AVAILABILITY_MESSAGE,
        )
    slot = build_slot_from_local(start_local, rules.slot_minutes, requested_location, rules.timezone)
    return SlotResolution(
        ok=True, slot=slot, exact_address=format_exact_address(config, slot.location)
    )


def format_slot_human(slot: InterviewSlot) -> str:
    when = f"{slot.day} {slot.time}".strip()
    return f"{when}, {slot.location}" if slot.location else when


def format_alternatives_human(alternatives: list[InterviewSlot]) -> str:
    if not alternatives:
        return ""
    lines = [f"- {slot.day} {slot.time} ({slot.location})" for slot in alternatives]
    return "Opciones:\n" + "\n".join(lines)
