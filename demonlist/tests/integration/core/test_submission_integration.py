import pytest
from pytest_mock import MockerFixture
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from demonlist.config.settings import settings
from demonlist.core.scoring import beaten_score
from demonlist.core.submission import Submission, submit_record
from demonlist.errors import (
    DemonNotFound,
    InvalidProgress,
    MalformedVideoUrl,
    Non100Extended,
    PlayerBanned,
    RawFootageRequired,
    SubmitLegacy,
)
from demonlist.models.enums import RecordStatus
from demonlist.models.player_orm import PlayerORM, SubmitterORM
from demonlist.models.record_orm import RecordNoteORM, RecordORM

RAW = "https://example.com/raw/footage.mp4"


async def record_count(session: AsyncSession) -> int:
    return await session.scalar(select(func.count()).select_from(RecordORM))


async def player_score(session: AsyncSession, name: str) -> float:
    return await session.scalar(select(PlayerORM.score).where(PlayerORM.name == name))


@pytest.mark.asyncio
async def test_submit_record(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1, requirement=50)

    record = await submit_record(
        Submission(
            progress=60,
            player="Alice",
            demon=demon.id,
            video="https://youtu.be/xyz",
            raw_footage=RAW,
            enjoyment=7,
        ),
        submitter=None,
    )

    assert record.id is not None
    assert record.status is RecordStatus.SUBMITTED
    assert record.player.name == "Alice"
    assert record.demon == demon.minimal
    assert record.video == "https://www.youtube.com/watch?v=xyz"
    assert record.enjoyment == 7

    stored = (await db_session.execute(select(RecordORM).where(RecordORM.id == record.id))).scalar_one()
    assert stored.progress == 60
    assert stored.status is RecordStatus.SUBMITTED
    assert stored.raw_footage == RAW
    assert await player_score(db_session, "Alice") == 0.0


@pytest.mark.asyncio
async def test_player_resolution_is_idempotent(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1)

    first = await submit_record(Submission(progress=70, player="Alice", demon=demon.id, raw_footage=RAW))
    second = await submit_record(Submission(progress=80, player=" alice", demon=demon.id, raw_footage=RAW))

    assert first.player.id == second.player.id
    assert second.player.name == "Alice"


@pytest.mark.asyncio
async def test_submit_record_for_non_ascii_player(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1, publisher="Ørjan")

    record = await submit_record(Submission(progress=100, player="Élan", demon=demon.id, raw_footage=RAW))
    again = await submit_record(Submission(progress=90, player="Élan", demon=demon.id, raw_footage=RAW))

    assert record.player.name == "Élan"
    assert again.player.id == record.player.id
    assert demon.publisher.name == "Ørjan"


@pytest.mark.asyncio
async def test_banned_player_is_rejected(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1)
    db_session.add(PlayerORM(name="Cheater", banned=True))
    await db_session.commit()

    with pytest.raises(PlayerBanned):
        await submit_record(Submission(progress=100, player="Cheater", demon=demon.id, raw_footage=RAW))

    assert await record_count(db_session) == 0


@pytest.mark.asyncio
async def test_unknown_demon(db_engine):
    with pytest.raises(DemonNotFound) as exc_info:
        await submit_record(Submission(progress=100, player="Alice", demon=12345, raw_footage=RAW))
    assert exc_info.value.key == 12345


@pytest.mark.asyncio
async def test_malformed_video_is_rejected_during_normalization(add_demon):
    demon = await add_demon("Bloodbath", 1)

    with pytest.raises(MalformedVideoUrl):
        await submit_record(Submission(progress=100, player="Alice", demon=demon.id, video="nope", raw_footage=RAW))


@pytest.mark.asyncio
async def test_rejected_submission_leaves_no_trace(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1)

    with pytest.raises(RawFootageRequired):
        await submit_record(Submission(progress=100, player="Newcomer", demon=demon.id))

    assert await record_count(db_session) == 0
    newcomer = await db_session.scalar(select(PlayerORM.id).where(PlayerORM.name == "Newcomer"))
    assert newcomer is None


@pytest.mark.asyncio
async def test_sub_list_rules(mocker: MockerFixture, add_demon):
    mocker.patch.object(settings, "LIST_SIZE", 1)
    mocker.patch.object(settings, "EXTENDED_LIST_SIZE", 2)

    await add_demon("Main", 1)
    extended = await add_demon("Extended", 2)
    legacy = await add_demon("Legacy", 3)

    with pytest.raises(Non100Extended):
        await submit_record(Submission(progress=99, player="Alice", demon=extended.id, raw_footage=RAW))
    with pytest.raises(SubmitLegacy):
        await submit_record(Submission(progress=100, player="Alice", demon=legacy.id, raw_footage=RAW))

    record = await submit_record(Submission(progress=100, player="Alice", demon=extended.id, raw_footage=RAW))
    assert record.demon.position == 2


@pytest.mark.asyncio
async def test_progress_below_requirement(add_demon):
    demon = await add_demon("Bloodbath", 1, requirement=50)

    with pytest.raises(InvalidProgress) as exc_info:
        await submit_record(Submission(progress=49, player="Alice", demon=demon.id, raw_footage=RAW))
    assert exc_info.value == InvalidProgress(requirement=50)


@pytest.mark.asyncio
async def test_approved_entry_updates_score_immediately(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1, requirement=50)

    record = await submit_record(
        Submission(progress=100, player="Alice", demon=demon.id, status="approved"),
    )

    assert record.status is RecordStatus.APPROVED
    stored = await db_session.scalar(select(RecordORM.status).where(RecordORM.id == record.id))
    assert stored is RecordStatus.APPROVED
    assert await player_score(db_session, "Alice") == pytest.approx(beaten_score(1))


@pytest.mark.asyncio
async def test_rejected_entry_does_not_score(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1, requirement=50)

    record = await submit_record(Submission(progress=100, player="Alice", demon=demon.id, status="rejected"))

    assert record.status is RecordStatus.REJECTED
    assert await player_score(db_session, "Alice") == 0.0


@pytest.mark.asyncio
async def test_note_is_persisted(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1)

    with_note = await submit_record(
        Submission(progress=100, player="Alice", demon=demon.id, raw_footage=RAW, note="Clicks in the raw footage")
    )
    await submit_record(Submission(progress=90, player="Alice", demon=demon.id, raw_footage=RAW, note="   "))

    notes = (await db_session.execute(select(RecordNoteORM))).scalars().all()
    assert len(notes) == 1
    assert notes[0].record == with_note.id
    assert notes[0].content == "Clicks in the raw footage"
    assert notes[0].is_public is False


@pytest.mark.asyncio
async def test_submitter_is_recorded(add_demon, db_session: AsyncSession):
    demon = await add_demon("Bloodbath", 1)
    submitter = SubmitterORM()
    db_session.add(submitter)
    await db_session.commit()

    record = await submit_record(
        Submission(progress=100, player="Alice", demon=demon.id, raw_footage=RAW),
        submitter=submitter.submitter_id,
    )

    assert record.submitter == submitter.submitter_id
    stored = await db_session.scalar(select(RecordORM.submitter).where(RecordORM.id == record.id))
    assert stored == submitter.submitter_id
