"""
SQLAlchemy ORM models for the 'records' and 'record_notes' tables.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Enum, ForeignKey, Index, Integer, SmallInteger, String, Text, false
from sqlalchemy import TIMESTAMP
from sqlalchemy.sql import func

from .base import Base
from .enums import RecordStatus


class RecordORM(Base):
    """
    SQLAlchemy ORM model representing a record on a demon.

    Attributes:
        id (int): Primary key, assigned on insert.
        progress (int): Progress in percent, 0..100.
        status (RecordStatus): Acceptance state.
        enjoyment (int, optional): Enjoyment rating, 0..10.
        video (str, optional): Canonical video URL.
        raw_footage (str, optional): Raw footage URL. Only operator-entered records may omit it.
        player (int): The player who achieved the record.
        demon (int): The demon the record is on.
        submitter (int, optional): The open-submission identity. None for operator-entered records.
    """
    __tablename__ = "records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    progress = Column(SmallInteger, nullable=False)
    status = Column(
        Enum(
            RecordStatus,
            name="record_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=RecordStatus.SUBMITTED,
    )
    enjoyment = Column(SmallInteger, nullable=True)
    video = Column(String(200), nullable=True)
    raw_footage = Column(Text, nullable=True)
    player = Column(Integer, ForeignKey("players.id"), nullable=False)
    demon = Column(Integer, ForeignKey("demons.id", ondelete="CASCADE"), nullable=False)
    submitter = Column(Integer, ForeignKey("submitters.submitter_id"), nullable=True)

    __table_args__ = (
        CheckConstraint("progress BETWEEN 0 AND 100", name="ck_records_progress"),
        CheckConstraint("enjoyment BETWEEN 0 AND 10", name="ck_records_enjoyment"),
        Index("idx_records_player_status", "player", "status"),
        Index("idx_records_demon", "demon"),
    )

    def __repr__(self) -> str:
        return (
            f"<RecordORM(id={self.id}, progress={self.progress}, demon={self.demon}, "
            f"player={self.player}, status='{self.status}')>"
        )


class RecordNoteORM(Base):
    """
    SQLAlchemy ORM model representing a free-text note attached to a record.
    """
    __tablename__ = "record_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    record = Column(Integer, ForeignKey("records.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    is_public = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_record_notes_record", "record"),
    )

    def __repr__(self) -> str:
        return f"<RecordNoteORM(id={self.id}, record={self.record})>"
