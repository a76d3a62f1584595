"""
SQLAlchemy ORM model for the 'demons' table and its 'creators' association table.
"""

from sqlalchemy import BigInteger, Column, Enum, ForeignKey, Index, Integer, SmallInteger, String, Table, Text

from .base import Base
from .enums import Difficulty


creators_table = Table(
    "creators",
    Base.metadata,
    Column("demon", Integer, ForeignKey("demons.id", ondelete="CASCADE"), primary_key=True),
    Column("creator", Integer, ForeignKey("players.id", ondelete="CASCADE"), primary_key=True),
)


class DemonORM(Base):
    """
    SQLAlchemy ORM model representing a demon on the list.

    Attributes:
        id (int): Primary key, auto-incrementing. Never changes.
        position (int): Position on the list. Positions of all demons form the range 1..N.
                        Only written by ``demonlist.core.positions``.
        name (str): The level's name. Not unique.
        requirement (int): Minimal progress a record needs, 0..100.
        difficulty (Difficulty): Difficulty tier.
        video (str, optional): Verification video.
        thumbnail (str): Thumbnail URL.
        level_id (int, optional): In-game level id.
        publisher (int): Player who published the level.
        verifier (int): Player who verified the level.
    """
    __tablename__ = "demons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # No unique constraint: the in-place shift passes through transient duplicates.
    position = Column(SmallInteger, nullable=False)
    name = Column(Text, nullable=False)
    requirement = Column(SmallInteger, nullable=False)
    difficulty = Column(
        Enum(
            Difficulty,
            name="level_difficulty",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    video = Column(String(200), nullable=True)
    thumbnail = Column(Text, nullable=False, default="", server_default="")
    level_id = Column(BigInteger, nullable=True)
    publisher = Column(Integer, ForeignKey("players.id"), nullable=False)
    verifier = Column(Integer, ForeignKey("players.id"), nullable=False)

    __table_args__ = (
        Index("idx_demons_position", "position"),
    )

    def __repr__(self) -> str:
        return f"<DemonORM(id={self.id}, name='{self.name}', position={self.position})>"
