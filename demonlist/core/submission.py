"""
Record submission pipeline.

A record goes through three stages before it is stored:

    Submission --normalize--> NormalizedSubmission --validate--> ValidatedSubmission --create--> FullRecordDTO

Each stage is its own immutable model and can only be produced from the
previous one, so a record that skipped validation has no way to reach
``create``. Normalization and validation only read; ``create`` is the only
step that writes.
"""
import logging
from typing import Optional

from pydantic import BaseModel, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from demonlist.config.settings import extended_list_size, list_size
from demonlist.core import demons, players, record_status
from demonlist.core.video import validate_raw_footage, validate_video
from demonlist.errors import (
    DemonlistError,
    InvalidEnjoymentRating,
    InvalidProgress,
    Non100Extended,
    PlayerBanned,
    RawFootageRequired,
    SubmitLegacy,
)
from demonlist.models.dtos import FullRecordDTO, MinimalDemonDTO, PlayerClaimDTO, PlayerDTO
from demonlist.models.enums import RecordStatus
from demonlist.models.record_orm import RecordNoteORM, RecordORM
from demonlist.utils.db_session import get_db_session_context_manager

logger = logging.getLogger(__name__)


class Submission(BaseModel):
    """
    A record as submitted, before anything about it was checked.
    """
    progress: int
    player: str
    demon: int
    video: Optional[str] = None
    raw_footage: Optional[str] = None
    status: RecordStatus = RecordStatus.SUBMITTED
    enjoyment: Optional[int] = None
    # An initial, submitter provided note for the record.
    note: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return RecordStatus.parse(v)

    def __str__(self) -> str:
        return f"{self.progress}% on {self.demon} by {self.player} [status: {self.status}]"

    def has_video(self) -> bool:
        return self.video is not None

    async def normalize(self, session: AsyncSession) -> "NormalizedSubmission":
        """
        Resolves the submitted player name and demon id against the database.

        The player is created if it does not exist yet. No business rules are
        checked here.
        """
        video = validate_video(self.video) if self.video is not None else None

        player = await players.resolve_or_create_player(self.player, session)
        demon = await demons.minimal_demon_by_id(self.demon, session)

        return NormalizedSubmission(
            progress=self.progress,
            player=player,
            demon=demon,
            status=self.status,
            enjoyment=self.enjoyment,
            video=video,
            raw_footage=self.raw_footage,
            note=self.note,
        )


class NormalizedSubmission(BaseModel):
    """
    A submission whose player and demon were resolved, but not yet checked against the list's rules.
    """
    progress: int
    player: PlayerDTO
    demon: MinimalDemonDTO
    status: RecordStatus
    enjoyment: Optional[int] = None
    video: Optional[str] = None
    raw_footage: Optional[str] = None
    note: Optional[str] = None

    model_config = {"frozen": True}

    async def verified_player_claim(self, session: AsyncSession) -> Optional[PlayerClaimDTO]:
        return await players.verified_claim_on(self.player.id, session)

    async def validate(self, session: AsyncSession) -> "ValidatedSubmission":
        """
        Checks the submission against the list's rules, in a fixed order.

        The first rule that fails decides the error. Records entered with a
        status other than SUBMITTED come from list staff and skip the rules
        that only guard open submissions.
        """
        open_submission = self.status == RecordStatus.SUBMITTED

        # Banned players can't have records on the list
        if self.player.banned:
            raise PlayerBanned()

        # Nobody may submit records for the legacy list
        if self.demon.position > extended_list_size() and open_submission:
            raise SubmitLegacy()

        # Only 100% records may be submitted for the extended list
        if self.demon.position > list_size() and self.progress != 100 and open_submission:
            raise Non100Extended()

        requirement = await demons.requirement_of(self.demon, session)

        if self.progress > 100 or self.progress < requirement:
            raise InvalidProgress(requirement=requirement)

        if self.enjoyment is not None and not 0 <= self.enjoyment <= 10:
            raise InvalidEnjoymentRating()

        if self.raw_footage is not None:
            validate_raw_footage(self.raw_footage)
        elif open_submission:
            raise RawFootageRequired()

        return ValidatedSubmission(
            progress=self.progress,
            player=self.player,
            demon=self.demon,
            status=self.status,
            enjoyment=self.enjoyment,
            video=self.video,
            raw_footage=self.raw_footage,
            note=self.note,
        )


class ValidatedSubmission(BaseModel):
    """
    A submission that passed every rule and may be stored.
    """
    progress: int
    player: PlayerDTO
    demon: MinimalDemonDTO
    status: RecordStatus
    enjoyment: Optional[int] = None
    video: Optional[str] = None
    raw_footage: Optional[str] = None
    note: Optional[str] = None

    model_config = {"frozen": True}

    async def create(self, submitter: Optional[int], session: AsyncSession) -> FullRecordDTO:
        """
        Stores the record.

        The row is inserted with its final status. If that status is not the
        default, the status transition routine runs right after so its side
        effects (score recomputation) happen exactly as for a later review.
        """
        row = RecordORM(
            progress=self.progress,
            video=self.video,
            raw_footage=self.raw_footage,
            status=self.status,
            enjoyment=self.enjoyment,
            player=self.player.id,
            demon=self.demon.id,
            submitter=submitter,
        )
        session.add(row)
        await session.flush()

        record = FullRecordDTO(
            id=row.id,
            progress=self.progress,
            video=self.video,
            raw_footage=self.raw_footage,
            status=RecordStatus.SUBMITTED,
            enjoyment=self.enjoyment,
            player=self.player,
            demon=self.demon,
            submitter=submitter,
        )

        if self.status != RecordStatus.SUBMITTED:
            record = await record_status.set_status(record, self.status, session)

        if self.note is not None and self.note.strip():
            session.add(RecordNoteORM(record=record.id, content=self.note))
            await session.flush()

        logger.info(f"Created record {record.id}: {record}")
        return record


async def submit_record(
    submission: Submission,
    submitter: Optional[int] = None,
    existing_session: Optional[AsyncSession] = None,
) -> FullRecordDTO:
    """
    Runs a submission through normalization, validation and creation as one unit of work.

    Nothing is committed unless every stage succeeds.
    """
    async with get_db_session_context_manager(existing_session) as session:
        try:
            normalized = await submission.normalize(session)
            validated = await normalized.validate(session)
            return await validated.create(submitter, session)
        except DemonlistError as e:
            logger.info(f"Rejected submission '{submission}': {e} (code {e.error_code})")
            raise
