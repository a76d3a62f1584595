"""
Enumerations shared by the ORM models and the core.

Both enums persist as their lowercase token, which is also their external
representation.
"""
import enum
from typing import Tuple

from demonlist.errors import InvalidDifficulty, InvalidRecordStatus


class Difficulty(str, enum.Enum):
    """
    The difficulty tier a level is in.

    Purely informational: tiers have no numeric ordering and do not feed the
    score function.
    """

    SILENT = "silent"
    LEGENDARY = "legendary"
    EXTREME = "extreme"
    MYTHICAL = "mythical"
    INSANE = "insane"
    HARD = "hard"
    MEDIUM = "medium"
    EASY = "easy"
    BEGINNER = "beginner"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def tokens(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        """Case-insensitive lookup by token, raising ``InvalidDifficulty`` for unknown input."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidDifficulty(value, cls.tokens()) from None


class RecordStatus(str, enum.Enum):
    """
    Acceptance state of a record.

    SUBMITTED is the open-submission default. Only APPROVED records count
    towards a player's score.
    """

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    UNDER_CONSIDERATION = "under consideration"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def tokens(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls, value: str) -> "RecordStatus":
        if isinstance(value, cls):
            return value
        normalized = str(value).lower().replace("_", " ")
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidRecordStatus(value, cls.tokens()) from None

    @property
    def affects_score(self) -> bool:
        return self is RecordStatus.APPROVED
