"""
Demon validation and mutations.

Adding, moving and removing demons happens inside ``position_mutation`` so
the position range stays contiguous under concurrent use. Score-relevant
changes (position, requirement) trigger a recomputation of the scores of the
players affected by them.
"""
import logging
from typing import List, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from demonlist.core import players, positions
from demonlist.core.video import validate_video
from demonlist.errors import DemonNotFound, InvalidLevelId, InvalidRequirement
from demonlist.models.demon_orm import DemonORM, creators_table
from demonlist.models.dtos import DemonDTO, MinimalDemonDTO, PatchDemon, PlayerDTO, PostDemon
from demonlist.models.player_orm import PlayerORM
from demonlist.models.record_orm import RecordORM

logger = logging.getLogger(__name__)

# Re-exported so callers validate all demon fields from one place.
validate_position = positions.validate_position


def validate_requirement(requirement: int) -> None:
    if not 0 <= requirement <= 100:
        raise InvalidRequirement()


def validate_level_id(level_id: int) -> int:
    """Level ids are positive 64-bit integers. Returns the id on success."""
    if level_id < 1:
        raise InvalidLevelId()
    return int(level_id)


async def _demon_orm(demon_id: int, session: AsyncSession) -> DemonORM:
    result = await session.execute(select(DemonORM).where(DemonORM.id == demon_id))
    demon = result.scalar_one_or_none()
    if demon is None:
        raise DemonNotFound(demon_id)
    return demon


async def _creators_of(demon_id: int, session: AsyncSession) -> List[PlayerDTO]:
    result = await session.execute(
        select(PlayerORM)
        .join(creators_table, creators_table.c.creator == PlayerORM.id)
        .where(creators_table.c.demon == demon_id)
        .order_by(PlayerORM.name)
    )
    return [PlayerDTO.model_validate(player) for player in result.scalars().all()]


async def _to_dto(demon: DemonORM, session: AsyncSession) -> DemonDTO:
    return DemonDTO(
        id=demon.id,
        position=demon.position,
        name=demon.name,
        requirement=demon.requirement,
        video=demon.video,
        thumbnail=demon.thumbnail or "",
        publisher=await players.player_by_id(demon.publisher, session),
        verifier=await players.player_by_id(demon.verifier, session),
        level_id=demon.level_id,
        difficulty=demon.difficulty,
        creators=await _creators_of(demon.id, session),
    )


async def get_demon(demon_id: int, session: AsyncSession) -> DemonDTO:
    demon = await _demon_orm(demon_id, session)
    # Positions are changed with bulk updates, re-read them.
    await session.refresh(demon)
    return await _to_dto(demon, session)


async def minimal_demon_by_id(demon_id: int, session: AsyncSession) -> MinimalDemonDTO:
    result = await session.execute(
        select(DemonORM.id, DemonORM.position, DemonORM.name).where(DemonORM.id == demon_id)
    )
    row = result.one_or_none()
    if row is None:
        raise DemonNotFound(demon_id)
    return MinimalDemonDTO(id=row.id, position=row.position, name=row.name)


async def requirement_of(demon: MinimalDemonDTO, session: AsyncSession) -> int:
    """Queries the record requirement of a demon without loading anything else."""
    result = await session.execute(select(DemonORM.requirement).where(DemonORM.id == demon.id))
    requirement = result.scalar_one_or_none()
    if requirement is None:
        raise DemonNotFound(demon.id)
    return requirement


async def list_positions(session: AsyncSession) -> List[int]:
    """All demon positions, ascending."""
    result = await session.execute(select(DemonORM.position).order_by(DemonORM.position))
    return list(result.scalars().all())


async def create_demon(data: PostDemon, existing_session: Optional[AsyncSession] = None) -> DemonDTO:
    """
    Adds a demon to the list at ``data.position``, moving every demon at or
    below that position down by one.
    """
    validate_requirement(data.requirement)
    level_id = validate_level_id(data.level_id) if data.level_id is not None else None
    video = validate_video(data.video) if data.video is not None else None

    async with positions.position_mutation(existing_session) as session:
        await positions.validate_position(data.position, session)

        publisher = await players.resolve_or_create_player(data.publisher, session)
        verifier = await players.resolve_or_create_player(data.verifier, session)

        await positions.shift_down(data.position, session)

        demon = DemonORM(
            position=data.position,
            name=data.name,
            requirement=data.requirement,
            difficulty=data.difficulty,
            video=video,
            thumbnail=data.thumbnail,
            level_id=level_id,
            publisher=publisher.id,
            verifier=verifier.id,
        )
        session.add(demon)
        await session.flush()

        creator_ids = []
        for creator_name in data.creators:
            creator = await players.resolve_or_create_player(creator_name, session)
            if creator.id not in creator_ids:
                creator_ids.append(creator.id)
        if creator_ids:
            await session.execute(
                insert(creators_table),
                [{"demon": demon.id, "creator": creator_id} for creator_id in creator_ids],
            )

        logger.info(f"Added demon {demon.name} (id {demon.id}) at position {demon.position}")

        await players.update_scores_from(data.position + 1, session)

        return await _to_dto(demon, session)


async def patch_demon(demon_id: int, patch: PatchDemon, existing_session: Optional[AsyncSession] = None) -> DemonDTO:
    """
    Applies the fields set on ``patch`` to a demon. Position changes are moves
    within the existing range.
    """
    if patch.requirement is not None:
        validate_requirement(patch.requirement)
    level_id = validate_level_id(patch.level_id) if patch.level_id is not None else None
    video = validate_video(patch.video) if patch.video is not None else None

    async with positions.position_mutation(existing_session) as session:
        demon = await _demon_orm(demon_id, session)
        await session.refresh(demon)

        rescore_from = None

        if patch.name is not None:
            demon.name = patch.name
        if patch.requirement is not None and patch.requirement != demon.requirement:
            demon.requirement = patch.requirement
            rescore_from = demon.position
        if video is not None:
            demon.video = video
        if patch.thumbnail is not None:
            demon.thumbnail = patch.thumbnail
        if level_id is not None:
            demon.level_id = level_id
        if patch.difficulty is not None:
            demon.difficulty = patch.difficulty
        if patch.verifier is not None:
            demon.verifier = (await players.resolve_or_create_player(patch.verifier, session)).id
        if patch.publisher is not None:
            demon.publisher = (await players.resolve_or_create_player(patch.publisher, session)).id

        await session.flush()

        if patch.position is not None and patch.position != demon.position:
            current = demon.position
            await positions.move(demon.id, current, patch.position, session)
            await session.refresh(demon)
            moved_from = min(current, patch.position)
            rescore_from = moved_from if rescore_from is None else min(rescore_from, moved_from)

        if rescore_from is not None:
            await players.update_scores_from(rescore_from, session)

        logger.info(f"Patched demon {demon.name} (id {demon.id}), now at position {demon.position}")
        return await _to_dto(demon, session)


async def delete_demon(demon_id: int, existing_session: Optional[AsyncSession] = None) -> None:
    """
    Removes a demon and its records from the list, moving every demon below it up by one.
    """
    async with positions.position_mutation(existing_session) as session:
        demon = await _demon_orm(demon_id, session)
        await session.refresh(demon)
        position = demon.position

        result = await session.execute(
            select(RecordORM.player).where(RecordORM.demon == demon_id).distinct()
        )
        record_holders = list(result.scalars().all())

        await session.execute(delete(RecordORM).where(RecordORM.demon == demon_id))
        await session.execute(delete(creators_table).where(creators_table.c.demon == demon_id))
        await session.delete(demon)
        await session.flush()

        await positions.shift_up(position, session)
        logger.info(f"Removed demon {demon_id} from position {position}")

        for player_id in record_holders:
            await players.update_score(player_id, session)
        await players.update_scores_from(position, session)
