"""Tenant availability rules: sanitizing the raw scheduling config and checking slots against it.

Bad tenant config never raises. Every malformed piece degrades to its default
and is logged so operators can see what was dropped.
"""
import json
import logging
import math
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any, NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from interview_agenda.core.config import settings
from interview_agenda.models.schedule import InterviewLocationConfig
from interview_agenda.models.scheduling_config import SchedulingConfigBase

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")
_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


class Weekday(IntEnum):
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


# Keys are lowercase and accent-free; lookups strip accents first.
WEEKDAY_NAMES: dict[str, Weekday] = {
    "lunes": Weekday.MONDAY,
    "martes": Weekday.TUESDAY,
    "miercoles": Weekday.WEDNESDAY,
    "jueves": Weekday.THURSDAY,
    "viernes": Weekday.FRIDAY,
    "sabado": Weekday.SATURDAY,
    "domingo": Weekday.SUNDAY,
    "monday": Weekday.MONDAY,
    "tuesday": Weekday.TUESDAY,
    "wednesday": Weekday.WEDNESDAY,
    "thursday": Weekday.THURSDAY,
    "friday": Weekday.FRIDAY,
    "saturday": Weekday.SATURDAY,
    "sunday": Weekday.SUNDAY,
}

WEEKDAY_LABELS: dict[Weekday, str] = {
    Weekday.MONDAY: "Lunes",
    Weekday.TUESDAY: "Martes",
    Weekday.WEDNESDAY: "Miércoles",
    Weekday.THURSDAY: "Jueves",
    Weekday.FRIDAY: "Viernes",
    Weekday.SATURDAY: "Sábado",
    Weekday.SUNDAY: "Domingo",
}


class AvailabilityInterval(NamedTuple):
    start_minutes: int
    end_minutes: int


WeeklyAvailability = dict[Weekday, tuple[AvailabilityInterval, ...]]

_BUSINESS_HOURS = (AvailabilityInterval(9 * 60, 18 * 60),)


def default_weekly_availability() -> WeeklyAvailability:
    """Mon-Fri 09:00-18:00, weekends closed."""
    return {
        day: _BUSINESS_HOURS if day <= Weekday.FRIDAY else ()
        for day in Weekday
    }


@dataclass(frozen=True)
class AvailabilityRules:
    timezone: str
    slot_minutes: int
    locations: tuple[InterviewLocationConfig, ...]
    weekly: WeeklyAvailability
    exception_dates: frozenset[str]

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def default_location(self) -> str:
        return self.locations[0].label


def _strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def lookup_weekday(name: str | None) -> Weekday | None:
    if not name:
        return None
    return WEEKDAY_NAMES.get(_strip_accents(name.strip().lower()))


def normalize_timezone(value: str | None) -> str:
    tz = (value or "").strip()
    return tz or settings.default_timezone


def normalize_slot_minutes(value: Any) -> int:
    """Clamp to (0, max_slot_minutes]; anything else falls back to the default length."""
    if isinstance(value, bool) or value is None:
        return settings.default_slot_minutes
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            logger.warning("Ignoring non-numeric slot minutes %r", value)
            return settings.default_slot_minutes
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        logger.warning("Ignoring invalid slot minutes %r", value)
        return settings.default_slot_minutes
    minutes = math.floor(value)
    if minutes <= 0 or minutes > settings.max_slot_minutes:
        logger.warning("Slot minutes %r out of range, using %d", value, settings.default_slot_minutes)
        return settings.default_slot_minutes
    return minutes


def normalize_location(value: str | None) -> str | None:
    """Collapse whitespace and capitalize each word; blank input gives None."""
    words = (value or "").split()
    if not words:
        return None
    return " ".join(word[:1].upper() + word[1:] for word in words)


def parse_time_to_minutes(value: str | None) -> int | None:
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def _safe_json_loads(raw: str | None, field: str) -> Any:
    if not raw or not isinstance(raw, str):
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Scheduling config %s is not valid JSON, using defaults", field)
        return None


def _optional_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _parse_location_item(item: Any) -> InterviewLocationConfig | None:
    if isinstance(item, str):
        label = normalize_location(item)
        return InterviewLocationConfig(label=label) if label else None
    if isinstance(item, dict):
        raw_label = item.get("label")
        label = normalize_location(raw_label) if isinstance(raw_label, str) else None
        if not label:
            return None
        return InterviewLocationConfig(
            label=label,
            exact_address=_optional_text(item.get("exactAddress")),
            instructions=_optional_text(item.get("instructions")),
        )
    return None


def get_location_configs(config: SchedulingConfigBase) -> list[InterviewLocationConfig]:
    parsed = _safe_json_loads(config.interview_locations, "interview_locations")
    if isinstance(parsed, list):
        items = []
        for raw in parsed:
            item = _parse_location_item(raw)
            if item is None:
                logger.warning("Dropping invalid interview location entry %r", raw)
                continue
            items.append(item)
        if items:
            return items
    fallback = normalize_location(config.default_interview_location) or settings.default_location
    return [InterviewLocationConfig(label=fallback)]


def resolve_location_config(
    config: SchedulingConfigBase, label: str | None
) -> InterviewLocationConfig | None:
    normalized = normalize_location(label)
    if not normalized:
        return None
    for loc in get_location_configs(config):
        if loc.label.lower() == normalized.lower():
            return loc
    return None


def format_exact_address(config: SchedulingConfigBase, label: str | None) -> str | None:
    loc = resolve_location_config(config, label)
    if not loc or not (loc.exact_address or loc.instructions):
        return None
    lines = []
    if loc.exact_address:
        lines.append(f"Dirección exacta: {loc.exact_address}")
    if loc.instructions:
        lines.append(loc.instructions)
    return "\n".join(lines)


def _parse_intervals(weekday: Weekday, entries: list[Any]) -> tuple[AvailabilityInterval, ...]:
    intervals = []
    for entry in entries:
        start = entry.get("start") if isinstance(entry, dict) else None
        end = entry.get("end") if isinstance(entry, dict) else None
        start_minutes = parse_time_to_minutes(start)
        end_minutes = parse_time_to_minutes(end)
        if start_minutes is None or end_minutes is None or start_minutes >= end_minutes:
            logger.warning("Dropping invalid availability interval %r for %s", entry, weekday.name)
            continue
        intervals.append(AvailabilityInterval(start_minutes, end_minutes))
    return tuple(intervals)


def get_weekly_availability(config: SchedulingConfigBase) -> WeeklyAvailability:
    parsed = _safe_json_loads(config.interview_weekly_availability, "interview_weekly_availability")
    if not isinstance(parsed, dict):
        return default_weekly_availability()

    availability: WeeklyAvailability = {day: () for day in Weekday}
    for key, value in parsed.items():
        weekday = lookup_weekday(str(key))
        if weekday is None:
            logger.warning("Ignoring unknown weekday key %r in weekly availability", key)
            continue
        if not isinstance(value, list):
            logger.warning("Ignoring non-list availability for %r", key)
            continue
        availability[weekday] = _parse_intervals(weekday, value)
    return availability


def get_exception_dates(config: SchedulingConfigBase) -> frozenset[str]:
    parsed = _safe_json_loads(config.interview_exceptions, "interview_exceptions")
    if not isinstance(parsed, list):
        return frozenset()
    out = set()
    for entry in parsed:
        raw = entry.get("date") if isinstance(entry, dict) else entry
        value = raw.strip() if isinstance(raw, str) else None
        if value and _DATE_RE.match(value):
            out.add(value)
        else:
            logger.warning("Dropping invalid exception date entry %r", entry)
    return frozenset(out)


def _valid_timezone(value: str | None) -> str:
    tz = normalize_timezone(value)
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using %s", tz, settings.default_timezone)
        return settings.default_timezone
    return tz


def load_availability_rules(config: SchedulingConfigBase) -> AvailabilityRules:
    """Sanitize a tenant config. Rebuilt on every call; nothing is cached."""
    return AvailabilityRules(
        timezone=_valid_timezone(config.interview_timezone),
        slot_minutes=normalize_slot_minutes(config.interview_slot_minutes),
        locations=tuple(get_location_configs(config)),
        weekly=get_weekly_availability(config),
        exception_dates=get_exception_dates(config),
    )


def is_slot_within_availability(
    start_local: datetime,
    slot_minutes: int,
    weekly: WeeklyAvailability,
    exception_dates: frozenset[str] | set[str],
) -> bool:
    """True only if the whole slot fits inside one interval of a non-exception day.

    start_local must already be in the tenant timezone.
    """
    if start_local.date().isoformat() in exception_dates:
        return False
    intervals = weekly.get(Weekday(start_local.isoweekday()), ())
    if not intervals:
        return False
    start_minutes = start_local.hour * 60 + start_local.minute
    end_minutes = start_minutes + slot_minutes
    return any(
        start_minutes >= interval.start_minutes and end_minutes <= interval.end_minutes
        for interval in intervals
    )
