"""
Models package for the demonlist.

This package contains SQLAlchemy ORM models, the enums they persist and Pydantic DTOs.
"""

# Ensure all ORM models are registered with the Base metadata when this package is imported.
from . import base
from . import demon_orm
from . import player_orm
from . import record_orm

# Import Base and ORM models for easy access
from .base import Base
from .demon_orm import DemonORM, creators_table
from .player_orm import PlayerClaimORM, PlayerORM, SubmitterORM
from .record_orm import RecordNoteORM, RecordORM

from .enums import Difficulty, RecordStatus

# Import DTOs for easy access
from .dtos import (
    DemonDTO,
    FullRecordDTO,
    MinimalDemonDTO,
    PatchDemon,
    PlayerClaimDTO,
    PlayerDTO,
    PostDemon,
    RankedPlayerDTO,
)

# Define what is exported with 'from demonlist.models import *'
__all__ = [
    # Base
    "Base",
    # ORMs
    "DemonORM",
    "creators_table",
    "PlayerClaimORM",
    "PlayerORM",
    "SubmitterORM",
    "RecordNoteORM",
    "RecordORM",
    # Enums
    "Difficulty",
    "RecordStatus",
    # DTOs
    "DemonDTO",
    "FullRecordDTO",
    "MinimalDemonDTO",
    "PatchDemon",
    "PlayerClaimDTO",
    "PlayerDTO",
    "PostDemon",
    "RankedPlayerDTO",
]
