from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from interview_agenda.models.slot_block import InterviewSlotBlock, SlotBlockCreate, SlotBlockPublic
from interview_agenda.services.availability_service import AvailabilityRules, normalize_location
from interview_agenda.services.slot_service import to_naive_utc


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


async def find_block(
    session: AsyncSession, start_at: datetime, location: str
) -> InterviewSlotBlock | None:
    result = await session.execute(
        select(InterviewSlotBlock).where(
            InterviewSlotBlock.start_at == to_naive_utc(start_at),
            InterviewSlotBlock.location == location,
            InterviewSlotBlock.archived_at.is_(None),
        )
    )
    return result.scalars().first()


async def find_blocks_by_instants(
    session: AsyncSession, instants: Sequence[datetime], location: str
) -> list[InterviewSlotBlock]:
    if not instants:
        return []
    result = await session.execute(
        select(InterviewSlotBlock).where(
            InterviewSlotBlock.start_at.in_([to_naive_utc(i) for i in instants]),
            InterviewSlotBlock.location == location,
            InterviewSlotBlock.archived_at.is_(None),
        )
    )
    return list(result.scalars().all())


async def create_block(
    session: AsyncSession, rules: AvailabilityRules, data: SlotBlockCreate
) -> InterviewSlotBlock:
    """Block one slot-length window. Raises IntegrityError if the instant/location is already blocked."""
    start_at = to_naive_utc(data.start_at)
    block = InterviewSlotBlock(
        start_at=start_at,
        end_at=start_at + timedelta(minutes=rules.slot_minutes),
        timezone=rules.timezone,
        location=normalize_location(data.location) or rules.default_location,
        reason=(data.reason or "").strip() or None,
        tag=(data.tag or "").strip() or None,
    )
    session.add(block)
    await session.flush()
    await session.refresh(block)
    return block


async def archive_block(session: AsyncSession, block_id: str) -> bool:
    result = await session.execute(
        select(InterviewSlotBlock).where(
            InterviewSlotBlock.id == block_id,
            InterviewSlotBlock.archived_at.is_(None),
        )
    )
    block = result.scalar_one_or_none()
    if not block:
        return False
    now = _utc_naive_now()
    block.archived_at = now
    block.updated_at = now
    session.add(block)
    await session.flush()
    return True


async def list_blocks(
    session: AsyncSession,
    start_inclusive: datetime | None = None,
    end_exclusive: datetime | None = None,
    tag: str | None = None,
) -> list[InterviewSlotBlock]:
    q = (
        select(InterviewSlotBlock)
        .where(InterviewSlotBlock.archived_at.is_(None))
        .order_by(InterviewSlotBlock.start_at)
    )
    if start_inclusive:
        q = q.where(InterviewSlotBlock.start_at >= to_naive_utc(start_inclusive))
    if end_exclusive:
        q = q.where(InterviewSlotBlock.start_at < to_naive_utc(end_exclusive))
    if tag:
        q = q.where(InterviewSlotBlock.tag == tag)
    result = await session.execute(q)
    return list(result.scalars().all())


def block_to_public(b: InterviewSlotBlock) -> SlotBlockPublic:
    return SlotBlockPublic(
        id=b.id,
        start_at=b.start_at,
        end_at=b.end_at,
        timezone=b.timezone,
        location=b.location,
        reason=b.reason,
        tag=b.tag,
        archived_at=b.archived_at,
        created_at=b.created_at,
    )
