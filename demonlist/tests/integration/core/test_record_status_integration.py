import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from demonlist.core.demons import delete_demon, patch_demon
from demonlist.core.record_status import get_record, transition_record
from demonlist.core.scoring import beaten_score, score
from demonlist.core.submission import Submission, submit_record
from demonlist.errors import InvalidRecordStatus, RecordNotFound
from demonlist.models.dtos import PatchDemon
from demonlist.models.enums import RecordStatus
from demonlist.models.player_orm import PlayerORM
from demonlist.models.record_orm import RecordORM

RAW = "https://example.com/raw.mp4"


async def player_score(session: AsyncSession, name: str = "Alice") -> float:
    return await session.scalar(select(PlayerORM.score).where(PlayerORM.name == name))


@pytest.mark.asyncio
async def test_get_record(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1)
    created = await submit_record(Submission(progress=100, player="Alice", demon=demon.id, raw_footage=RAW, enjoyment=3))

    record = await get_record(created.id, db_session)
    assert record == created

    with pytest.raises(RecordNotFound):
        await get_record(created.id + 1, db_session)


@pytest.mark.asyncio
async def test_approval_and_rejection_recompute_score(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 2)
    await add_demon("Tartarus", 1)
    record = await submit_record(Submission(progress=100, player="Alice", demon=demon.id, raw_footage=RAW))
    assert await player_score(db_session) == 0.0

    approved = await transition_record(record.id, "approved")
    assert approved.status is RecordStatus.APPROVED
    assert await player_score(db_session) == pytest.approx(beaten_score(2))

    rejected = await transition_record(record.id, RecordStatus.REJECTED)
    assert rejected.status is RecordStatus.REJECTED
    assert await player_score(db_session) == 0.0

    stored = await db_session.scalar(select(RecordORM.status).where(RecordORM.id == record.id))
    assert stored is RecordStatus.REJECTED


@pytest.mark.asyncio
async def test_transitions_not_touching_approved_leave_score(add_demon, db_session: AsyncSession, mocker):
    demon = await add_demon("Bloodbath", 1)
    record = await submit_record(Submission(progress=100, player="Alice", demon=demon.id, raw_footage=RAW))
    update_score = mocker.patch("demonlist.core.players.update_score")

    moved = await transition_record(record.id, "under consideration")

    assert moved.status is RecordStatus.UNDER_CONSIDERATION
    update_score.assert_not_called()


@pytest.mark.asyncio
async def test_transition_errors(add_demon, db_engine):
    demon = await add_demon("Bloodbath", 1)
    record = await submit_record(Submission(progress=100, player="Alice", demon=demon.id, raw_footage=RAW))

    with pytest.raises(RecordNotFound):
        await transition_record(record.id + 100, "approved")
    with pytest.raises(InvalidRecordStatus):
        await transition_record(record.id, "pending")


@pytest.mark.asyncio
async def test_only_best_record_per_demon_counts(add_demon, db_session: AsyncSession):
    first = await add_demon("Bloodbath", 1, requirement=50)
    second = await add_demon("Tartarus", 2, requirement=40)

    await submit_record(Submission(progress=60, player="Alice", demon=first.id, status="approved"))
    await submit_record(Submission(progress=100, player="Alice", demon=first.id, status="approved"))
    await submit_record(Submission(progress=40, player="Alice", demon=second.id, status="approved"))

    expected = beaten_score(1) + score(2, 40, 40)
    assert await player_score(db_session) == pytest.approx(expected)


@pytest.mark.asyncio
async def test_position_changes_rescore_players(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1)
    await submit_record(Submission(progress=100, player="Alice", demon=demon.id, status="approved"))
    assert await player_score(db_session) == pytest.approx(beaten_score(1))

    newcomer = await add_demon("Newcomer", 1)
    assert await player_score(db_session) == pytest.approx(beaten_score(2))

    await patch_demon(demon.id, PatchDemon(position=1))
    assert await player_score(db_session) == pytest.approx(beaten_score(1))

    await patch_demon(demon.id, PatchDemon(requirement=100))
    assert await player_score(db_session) == pytest.approx(beaten_score(1))

    await delete_demon(newcomer.id)
    assert await player_score(db_session) == pytest.approx(beaten_score(1))

    await delete_demon(demon.id)
    assert await player_score(db_session) == 0.0
