"""
Player resolution, claims and aggregate scores.
"""
import logging
from typing import Dict, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from demonlist.core.scoring import score
from demonlist.errors import PlayerNotFound
from demonlist.models.demon_orm import DemonORM
from demonlist.models.dtos import PlayerClaimDTO, PlayerDTO, RankedPlayerDTO
from demonlist.models.enums import RecordStatus
from demonlist.models.player_orm import PlayerClaimORM, PlayerORM
from demonlist.models.record_orm import RecordORM
from demonlist.utils.db_session import dialect_name

logger = logging.getLogger(__name__)


async def player_by_id(player_id: int, session: AsyncSession) -> PlayerDTO:
    player = await session.get(PlayerORM, player_id)
    if player is None:
        raise PlayerNotFound(player_id)
    return PlayerDTO.model_validate(player)


async def ranked_player(player_id: int, session: AsyncSession) -> RankedPlayerDTO:
    """Returns the player together with their stored aggregate score."""
    player = await session.get(PlayerORM, player_id, populate_existing=True)
    if player is None:
        raise PlayerNotFound(player_id)
    return RankedPlayerDTO.model_validate(player)


async def player_by_name(name: str, session: AsyncSession) -> Optional[PlayerDTO]:
    """Case-insensitive lookup by name, with both sides folded by the database."""
    result = await session.execute(
        select(PlayerORM)
        .where(func.lower(PlayerORM.name) == func.lower(name.strip()))
        .order_by(PlayerORM.id)
        .limit(1)
    )
    player = result.scalar_one_or_none()
    return PlayerDTO.model_validate(player) if player is not None else None


async def resolve_or_create_player(name: str, session: AsyncSession) -> PlayerDTO:
    """
    Resolves a player name to its player, creating the player if none exists.

    Idempotent: resolving the same name again yields the same player, also
    when two callers race to create it.
    """
    name = name.strip()

    existing = await player_by_name(name, session)
    if existing is not None:
        return existing

    if dialect_name(session) == "postgresql":
        stmt = postgresql.insert(PlayerORM).values(name=name)
    else:
        stmt = sqlite.insert(PlayerORM).values(name=name)
    await session.execute(stmt.on_conflict_do_nothing(index_elements=["name"]))

    # The unique constraint is on the exact name, so the row exists either way
    created = await session.scalar(select(PlayerORM).where(PlayerORM.name == name))
    if created is None:
        raise PlayerNotFound(name)

    player = PlayerDTO.model_validate(created)
    logger.info(f"Created player {player.name} (id {player.id})")
    return player


async def verified_claim_on(player_id: int, session: AsyncSession) -> Optional[PlayerClaimDTO]:
    """Returns the verified claim on the given player, if there is one."""
    result = await session.execute(
        select(PlayerClaimORM)
        .where(PlayerClaimORM.player == player_id, PlayerClaimORM.verified.is_(True))
        .limit(1)
    )
    claim = result.scalar_one_or_none()
    return PlayerClaimDTO.model_validate(claim) if claim is not None else None


async def update_score(player_id: int, session: AsyncSession) -> float:
    """
    Recomputes and stores the aggregate score of a player.

    The aggregate is the sum, over all demons, of the score of the player's
    best approved record on that demon.
    """
    result = await session.execute(
        select(RecordORM.demon, RecordORM.progress, DemonORM.position, DemonORM.requirement)
        .join(DemonORM, DemonORM.id == RecordORM.demon)
        .where(RecordORM.player == player_id, RecordORM.status == RecordStatus.APPROVED)
    )

    best: Dict[int, float] = {}
    for demon_id, progress, position, requirement in result.all():
        best[demon_id] = max(best.get(demon_id, 0.0), score(position, progress, requirement))

    total = sum(best.values())

    await session.execute(
        update(PlayerORM).where(PlayerORM.id == player_id).values(score=total)
    )
    logger.debug(f"Player {player_id} now has a score of {total:.3f}")
    return total


async def update_scores_from(position: int, session: AsyncSession) -> int:
    """
    Recomputes the score of every player with an approved record on a demon at ``position`` or below.

    Called after positions changed. Returns the number of players updated.
    """
    result = await session.execute(
        select(RecordORM.player)
        .join(DemonORM, DemonORM.id == RecordORM.demon)
        .where(DemonORM.position >= position, RecordORM.status == RecordStatus.APPROVED)
        .distinct()
    )
    player_ids = list(result.scalars().all())

    for player_id in player_ids:
        await update_score(player_id, session)

    if player_ids:
        logger.info(f"Recomputed scores of {len(player_ids)} players affected by changes at position {position}")
    return len(player_ids)
