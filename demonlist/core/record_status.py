"""
Record status transitions.

``set_status`` is the one routine that changes a record's status. Record
creation with a non-default status goes through it too, so the side effects
of a transition live in exactly one place.
"""
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from demonlist.core import players
from demonlist.errors import RecordNotFound
from demonlist.models.demon_orm import DemonORM
from demonlist.models.dtos import FullRecordDTO, MinimalDemonDTO, PlayerDTO
from demonlist.models.enums import RecordStatus
from demonlist.models.player_orm import PlayerORM
from demonlist.models.record_orm import RecordORM
from demonlist.utils.db_session import get_db_session_context_manager

logger = logging.getLogger(__name__)


async def get_record(record_id: int, session: AsyncSession) -> FullRecordDTO:
    result = await session.execute(
        select(RecordORM, PlayerORM, DemonORM.id, DemonORM.position, DemonORM.name)
        .join(PlayerORM, PlayerORM.id == RecordORM.player)
        .join(DemonORM, DemonORM.id == RecordORM.demon)
        .where(RecordORM.id == record_id)
        .execution_options(populate_existing=True)
    )
    row = result.one_or_none()
    if row is None:
        raise RecordNotFound(record_id)

    record, player, demon_id, position, name = row
    return FullRecordDTO(
        id=record.id,
        progress=record.progress,
        video=record.video,
        raw_footage=record.raw_footage,
        status=record.status,
        enjoyment=record.enjoyment,
        player=PlayerDTO.model_validate(player),
        demon=MinimalDemonDTO(id=demon_id, position=position, name=name),
        submitter=record.submitter,
    )


async def set_status(record: FullRecordDTO, status: RecordStatus, session: AsyncSession) -> FullRecordDTO:
    """
    Moves ``record`` from its current status to ``status``.

    This never re-validates the record: it already exists and is only being
    reclassified. When the transition enters or leaves APPROVED, the owning
    player's score is recomputed before this returns.
    """
    previous = record.status

    await session.execute(
        update(RecordORM).where(RecordORM.id == record.id).values(status=status)
    )

    if previous != status:
        logger.info(f"Record {record.id} transitioned from {previous} to {status}")

    if previous != status and (previous.affects_score or status.affects_score):
        await players.update_score(record.player.id, session)

    return record.model_copy(update={"status": status})


async def transition_record(
    record_id: int, status: RecordStatus, existing_session: Optional[AsyncSession] = None
) -> FullRecordDTO:
    """Loads a record and moves it to ``status`` in one unit of work."""
    status = RecordStatus.parse(status)
    async with get_db_session_context_manager(existing_session) as session:
        record = await get_record(record_id, session)
        return await set_status(record, status, session)
