import json
import logging
from datetime import UTC, datetime

import pytest

from interview_agenda.services.availability_service import (
    AvailabilityInterval,
    Weekday,
    default_weekly_availability,
    format_exact_address,
    get_exception_dates,
    get_location_configs,
    get_weekly_availability,
    is_slot_within_availability,
    load_availability_rules,
    lookup_weekday,
    normalize_location,
    normalize_slot_minutes,
    normalize_timezone,
    parse_time_to_minutes,
)
from tests.conftest import make_config


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 30),
        (0, 30),
        (-5, 30),
        (481, 30),
        (480, 480),
        (1, 1),
        (45.9, 45),
        ("45", 45),
        ("abc", 30),
        (True, 30),
        (float("nan"), 30),
    ],
)
def test_slot_minutes_clamped(raw, expected):
    assert normalize_slot_minutes(raw) == expected


def test_timezone_falls_back_when_blank():
    assert normalize_timezone("  ") == "America/Santiago"
    assert normalize_timezone(None) == "America/Santiago"
    assert normalize_timezone(" Europe/Madrid ") == "Europe/Madrid"


def test_unknown_timezone_degrades_to_default(caplog):
    with caplog.at_level(logging.WARNING):
        rules = load_availability_rules(make_config(interview_timezone="Mars/Olympus"))
    assert rules.timezone == "America/Santiago"
    assert "Unknown timezone" in caplog.text


def test_normalize_location():
    assert normalize_location("  santiago   centro ") == "Santiago Centro"
    assert normalize_location("Online") == "Online"
    assert normalize_location("   ") is None
    assert normalize_location(None) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9:05", 545),
        (" 08:30 ", 510),
        ("00:00", 0),
        ("23:59", 1439),
        ("24:00", None),
        ("12:60", None),
        ("1200", None),
        ("12:5", None),
        ("١٢:٠٠", None),
        ("１３:００", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_time_to_minutes(raw, expected):
    assert parse_time_to_minutes(raw) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("martes", Weekday.TUESDAY),
        ("MIÉRCOLES", Weekday.WEDNESDAY),
        ("miercoles", Weekday.WEDNESDAY),
        (" Sábado ", Weekday.SATURDAY),
        ("Tuesday", Weekday.TUESDAY),
        ("domingo", Weekday.SUNDAY),
        ("feriado", None),
        ("", None),
    ],
)
def test_lookup_weekday(name, expected):
    assert lookup_weekday(name) == expected


def test_default_template_is_business_hours():
    weekly = default_weekly_availability()
    assert weekly[Weekday.MONDAY] == (AvailabilityInterval(540, 1080),)
    assert weekly[Weekday.FRIDAY] == (AvailabilityInterval(540, 1080),)
    assert weekly[Weekday.SATURDAY] == ()
    assert weekly[Weekday.SUNDAY] == ()


def test_weekly_availability_drops_bad_entries():
    raw = json.dumps(
        {
            "lunes": [
                {"start": "10:00", "end": "12:00"},
                {"start": "14:00", "end": "13:00"},
                {"start": "25:00", "end": "26:00"},
                "10-12",
            ],
            "Miércoles": [{"start": "9:00", "end": "11:30"}],
            "feriado": [{"start": "9:00", "end": "10:00"}],
            "jueves": "all day",
        }
    )
    weekly = get_weekly_availability(make_config(interview_weekly_availability=raw))
    assert weekly[Weekday.MONDAY] == (AvailabilityInterval(600, 720),)
    assert weekly[Weekday.WEDNESDAY] == (AvailabilityInterval(540, 690),)
    assert weekly[Weekday.TUESDAY] == ()
    assert weekly[Weekday.THURSDAY] == ()


@pytest.mark.parametrize("raw", [None, "", "{not json", "[]", '"lunes"'])
def test_unparseable_weekly_availability_uses_default(raw):
    weekly = get_weekly_availability(make_config(interview_weekly_availability=raw))
    assert weekly == default_weekly_availability()


def test_exception_dates_are_strictly_validated():
    raw = json.dumps(
        ["2026-10-20", {"date": " 2026-12-25 "}, "2026/10/21", 5, {"day": "x"}, "26-1-1", "٢٠٢٦-10-22"],
        ensure_ascii=False,
    )
    assert get_exception_dates(make_config(interview_exceptions=raw)) == frozenset(
        {"2026-10-20", "2026-12-25"}
    )
    assert get_exception_dates(make_config(interview_exceptions="oops")) == frozenset()


def test_location_configs_parse_strings_and_objects():
    raw = json.dumps(
        [
            "  sala   norte",
            {"label": "oficina central", "exactAddress": " Av. Siempre Viva 742 ", "instructions": ""},
            {"label": "  "},
            3,
        ]
    )
    locations = get_location_configs(make_config(interview_locations=raw))
    assert [loc.label for loc in locations] == ["Sala Norte", "Oficina Central"]
    assert locations[1].exact_address == "Av. Siempre Viva 742"
    assert locations[1].instructions is None


def test_location_configs_fallback():
    config = make_config(interview_locations="[]", default_interview_location="sede  sur")
    assert [loc.label for loc in get_location_configs(config)] == ["Sede Sur"]
    assert [loc.label for loc in get_location_configs(make_config())] == ["Online"]


def test_format_exact_address():
    raw = json.dumps(
        [
            {"label": "Oficina", "exactAddress": "Av. 1 #23", "instructions": "Piso 4, toca el timbre"},
            "Online",
        ]
    )
    config = make_config(interview_locations=raw)
    assert format_exact_address(config, "oficina") == "Dirección exacta: Av. 1 #23\nPiso 4, toca el timbre"
    assert format_exact_address(config, "Online") is None
    assert format_exact_address(config, "Remota") is None


def test_load_rules_defaults():
    rules = load_availability_rules(make_config(interview_timezone=None))
    assert rules.timezone == "America/Santiago"
    assert rules.slot_minutes == 30
    assert rules.default_location == "Online"
    assert rules.exception_dates == frozenset()


class TestIsSlotWithinAvailability:
    weekly = default_weekly_availability()

    def test_inside_interval(self):
        start = datetime(2026, 10, 20, 13, 0, tzinfo=UTC)
        assert is_slot_within_availability(start, 30, self.weekly, set())

    def test_last_full_slot_fits(self):
        start = datetime(2026, 10, 20, 17, 30, tzinfo=UTC)
        assert is_slot_within_availability(start, 30, self.weekly, set())

    def test_partial_overlap_rejected(self):
        start = datetime(2026, 10, 20, 17, 45, tzinfo=UTC)
        assert not is_slot_within_availability(start, 30, self.weekly, set())

    def test_before_open_rejected(self):
        start = datetime(2026, 10, 20, 8, 45, tzinfo=UTC)
        assert not is_slot_within_availability(start, 30, self.weekly, set())

    def test_empty_weekday_rejected(self):
        start = datetime(2026, 10, 25, 10, 0, tzinfo=UTC)  # Sunday
        assert not is_slot_within_availability(start, 30, self.weekly, set())

    def test_exception_overrides_open_interval(self):
        start = datetime(2026, 10, 20, 13, 0, tzinfo=UTC)
        assert not is_slot_within_availability(start, 30, self.weekly, {"2026-10-20"})
