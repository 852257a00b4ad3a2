import json
from datetime import UTC, datetime, timedelta

from interview_agenda.models.slot_block import SlotBlockCreate
from interview_agenda.services.alternatives_service import (
    generate_candidate_starts,
    suggest_alternatives,
)
from interview_agenda.services.availability_service import load_availability_rules
from interview_agenda.services.block_service import archive_block, create_block
from interview_agenda.services.reservation_service import create_reservation
from tests.conftest import NOW, make_config


async def _reserve(session, start: datetime, location: str = "Online", conversation_id: str = "c-busy"):
    return await create_reservation(
        session,
        conversation_id=conversation_id,
        contact_id="contact",
        start_at=start,
        end_at=start + timedelta(minutes=30),
        timezone="UTC",
        location=location,
    )


async def test_alternatives_start_after_now_in_order(session, utc_config):
    rules = load_availability_rules(utc_config)
    slots = await suggest_alternatives(session, rules, "Online", now=NOW)
    assert [s.time for s in slots] == ["15:30", "16:00", "16:30", "17:00", "17:30"]
    assert all(s.day == "Lunes" and s.location == "Online" for s in slots)
    assert all(s.end_at - s.start_at == timedelta(minutes=30) for s in slots)


async def test_alternatives_are_ascending_unique_and_bounded(session, utc_config):
    rules = load_availability_rules(utc_config)
    slots = await suggest_alternatives(session, rules, "Online", now=NOW, limit=12)
    starts = [s.start_at for s in slots]
    assert len(slots) == 12
    assert starts == sorted(starts)
    assert len(set(starts)) == len(starts)
    assert all(start > NOW for start in starts)


async def test_alternatives_skip_reservations_and_blocks(session, utc_config):
    rules = load_availability_rules(utc_config)
    await _reserve(session, datetime(2026, 10, 19, 15, 30, tzinfo=UTC))
    await create_block(session, rules, SlotBlockCreate(start_at=datetime(2026, 10, 19, 16, 30, tzinfo=UTC)))
    slots = await suggest_alternatives(session, rules, "Online", now=NOW)
    assert [s.time for s in slots] == ["16:00", "17:00", "17:30", "09:00", "09:30"]
    assert slots[-1].day == "Martes"


async def test_busy_slots_only_count_for_their_location(session, utc_config):
    rules = load_availability_rules(utc_config)
    await _reserve(session, datetime(2026, 10, 19, 15, 30, tzinfo=UTC), location="Oficina")
    slots = await suggest_alternatives(session, rules, "Online", now=NOW, limit=1)
    assert slots[0].time == "15:30"


async def test_archived_blocks_do_not_count(session, utc_config):
    rules = load_availability_rules(utc_config)
    block = await create_block(session, rules, SlotBlockCreate(start_at=datetime(2026, 10, 19, 15, 30, tzinfo=UTC)))
    assert await archive_block(session, block.id)
    slots = await suggest_alternatives(session, rules, "Online", now=NOW, limit=1)
    assert slots[0].time == "15:30"


async def test_exception_days_are_skipped(session):
    config = make_config(interview_exceptions=json.dumps(["2026-10-19", "2026-10-20"]))
    rules = load_availability_rules(config)
    slots = await suggest_alternatives(session, rules, "Online", now=NOW, limit=2)
    assert [(s.day, s.time) for s in slots] == [("Miércoles", "09:00"), ("Miércoles", "09:30")]


async def test_horizon_bounds_the_search(session):
    config = make_config(interview_weekly_availability=json.dumps({"viernes": [{"start": "09:00", "end": "10:00"}]}))
    rules = load_availability_rules(config)
    assert await suggest_alternatives(session, rules, "Online", now=NOW, search_days=3) == []
    slots = await suggest_alternatives(session, rules, "Online", now=NOW, search_days=14)
    assert [(s.day, s.time) for s in slots] == [
        ("Viernes", "09:00"),
        ("Viernes", "09:30"),
        ("Viernes", "09:00"),
        ("Viernes", "09:30"),
    ]
    assert slots[2].start_at - slots[0].start_at == timedelta(days=7)


async def test_zero_limit_returns_nothing(session, utc_config):
    rules = load_availability_rules(utc_config)
    assert await suggest_alternatives(session, rules, "Online", now=NOW, limit=0) == []


def test_overlapping_intervals_are_deduplicated():
    config = make_config(
        interview_weekly_availability=json.dumps(
            {"martes": [{"start": "09:00", "end": "10:00"}, {"start": "09:30", "end": "10:30"}]}
        )
    )
    rules = load_availability_rules(config)
    starts = generate_candidate_starts(rules, NOW, limit=5, search_days=2)
    assert [s.strftime("%H:%M") for s in starts] == ["09:00", "09:30", "10:00"]


def test_candidate_generation_stops_once_enough_collected(utc_config):
    rules = load_availability_rules(utc_config)
    # One open weekday yields 18 starts; a limit of 1 needs 20 raw candidates.
    starts = generate_candidate_starts(rules, datetime(2026, 10, 18, 12, 0, tzinfo=UTC), limit=1, search_days=14)
    assert len(starts) == 36
    assert starts[-1].date().isoformat() == "2026-10-20"
