import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from demonlist.core import players
from demonlist.core.record_status import transition_record
from demonlist.core.scoring import beaten_score
from demonlist.core.submission import Submission, submit_record
from demonlist.errors import PlayerNotFound
from demonlist.models.enums import RecordStatus
from demonlist.models.player_orm import PlayerClaimORM

RAW = "https://example.com/raw/footage.mp4"


@pytest.mark.asyncio
async def test_resolve_or_create_player_is_idempotent(db_session: AsyncSession):
    created = await players.resolve_or_create_player("  Zoink ", db_session)
    again = await players.resolve_or_create_player("zoink", db_session)
    await db_session.commit()

    assert created.name == "Zoink"
    assert again == created
    assert await players.player_by_id(created.id, db_session) == created


@pytest.mark.asyncio
async def test_player_lookups(db_session: AsyncSession):
    assert await players.player_by_name("nobody", db_session) is None

    with pytest.raises(PlayerNotFound) as exc_info:
        await players.player_by_id(999, db_session)
    assert exc_info.value == PlayerNotFound(999)


@pytest.mark.asyncio
async def test_verified_claim(db_session: AsyncSession):
    player = await players.resolve_or_create_player("Cursed", db_session)
    db_session.add(PlayerClaimORM(member_id=42, player=player.id, verified=False))
    await db_session.flush()

    assert await players.verified_claim_on(player.id, db_session) is None

    db_session.add(PlayerClaimORM(member_id=43, player=player.id, verified=True))
    await db_session.flush()

    claim = await players.verified_claim_on(player.id, db_session)
    assert claim is not None
    assert claim.member_id == 43
    assert claim.verified is True
    assert claim.lock_submissions is False


@pytest.mark.asyncio
async def test_update_score_without_records(db_session: AsyncSession):
    player = await players.resolve_or_create_player("Idle", db_session)
    assert await players.update_score(player.id, db_session) == 0.0
    assert await players.update_scores_from(1, db_session) == 0


@pytest.mark.asyncio
async def test_resolve_non_ascii_player_name(db_session: AsyncSession):
    created = await players.resolve_or_create_player("Ärger", db_session)
    again = await players.resolve_or_create_player(" Ärger ", db_session)
    await db_session.commit()

    assert created.name == "Ärger"
    assert again == created
    assert await players.player_by_name("Ärger", db_session) == created


@pytest.mark.asyncio
async def test_ranked_player_carries_score(add_demon, db_session: AsyncSession):
    first = await add_demon("Bloodbath", 1, requirement=50)
    second = await add_demon("Slaughterhouse", 2, requirement=50)
    for demon in (first, second):
        record = await submit_record(Submission(progress=100, player="Élan", demon=demon.id, raw_footage=RAW))
        await transition_record(record.id, RecordStatus.APPROVED)

    player = await players.player_by_name("Élan", db_session)
    ranked = await players.ranked_player(player.id, db_session)

    assert ranked.id == player.id
    assert ranked.name == "Élan"
    assert ranked.score == pytest.approx(beaten_score(1) + beaten_score(2))

    assert await players.update_scores_from(1, db_session) == 1
    assert (await players.ranked_player(player.id, db_session)).score == pytest.approx(ranked.score)

    with pytest.raises(PlayerNotFound):
        await players.ranked_player(player.id + 1, db_session)
