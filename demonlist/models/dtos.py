"""
Pydantic Data Transfer Objects (DTOs) for the demonlist.

These models are what the core hands back to its caller, ready for external
serialization, and what it accepts as request bodies for demon mutations.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from demonlist.core.scoring import score as score_of
from demonlist.models.enums import Difficulty, RecordStatus


class PlayerDTO(BaseModel):
    """
    Minimal representation of a player, as embedded in demons and records.
    """
    id: int
    name: str
    banned: bool = False

    model_config = {"from_attributes": True, "frozen": True}


class RankedPlayerDTO(PlayerDTO):
    """Player together with their aggregate score."""
    score: float = 0.0


class PlayerClaimDTO(BaseModel):
    id: int
    member_id: int
    player: int
    verified: bool
    lock_submissions: bool = False

    model_config = {"from_attributes": True, "frozen": True}


class MinimalDemonDTO(BaseModel):
    """
    Absolutely minimal representation of a demon, used when a demon is part of another object.
    """
    id: int
    position: int
    name: str

    model_config = {"from_attributes": True, "frozen": True}

    def __str__(self) -> str:
        return f"{self.name} (at {self.position})"


class DemonDTO(MinimalDemonDTO):
    """
    DTO for a demon with its metadata and publisher/verifier.

    Mirrors DemonORM, with the player foreign keys resolved.
    """
    requirement: int
    video: Optional[str] = None
    thumbnail: str = ""
    publisher: PlayerDTO
    verifier: PlayerDTO
    level_id: Optional[int] = None
    difficulty: Difficulty
    creators: List[PlayerDTO] = Field(default_factory=list)

    @property
    def minimal(self) -> MinimalDemonDTO:
        return MinimalDemonDTO(id=self.id, position=self.position, name=self.name)

    def score(self, progress: int) -> float:
        """Score a record with the given progress on this demon is worth."""
        return score_of(self.position, progress, self.requirement)


class FullRecordDTO(BaseModel):
    """
    DTO for a persisted record with its player and demon resolved.
    """
    id: int
    progress: int
    video: Optional[str] = None
    raw_footage: Optional[str] = None
    status: RecordStatus
    enjoyment: Optional[int] = None
    player: PlayerDTO
    demon: MinimalDemonDTO
    submitter: Optional[int] = None

    model_config = {"from_attributes": True}

    def __str__(self) -> str:
        return f"{self.progress}% on {self.demon} by {self.player.name} [status: {self.status}]"


class PostDemon(BaseModel):
    """
    Request model for adding a demon to the list.
    """
    name: str = Field(..., min_length=1)
    position: int
    requirement: int
    verifier: str = Field(..., min_length=1, description="Name of the verifying player.")
    publisher: str = Field(..., min_length=1, description="Name of the publishing player.")
    creators: List[str] = Field(default_factory=list, description="Names of the level's creators.")
    video: Optional[str] = None
    thumbnail: str = ""
    level_id: Optional[int] = None
    difficulty: Difficulty

    @field_validator("difficulty", mode="before")
    @classmethod
    def parse_difficulty(cls, v):
        return Difficulty.parse(v)


class PatchDemon(BaseModel):
    """
    Request model for modifying a demon. Fields left unset are not touched.
    """
    name: Optional[str] = None
    position: Optional[int] = None
    requirement: Optional[int] = None
    verifier: Optional[str] = None
    publisher: Optional[str] = None
    video: Optional[str] = None
    thumbnail: Optional[str] = None
    level_id: Optional[int] = None
    difficulty: Optional[Difficulty] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def parse_difficulty(cls, v):
        if v is None:
            return None
        return Difficulty.parse(v)
