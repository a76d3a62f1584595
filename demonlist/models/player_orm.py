"""
SQLAlchemy ORM models for the 'players', 'player_claims' and 'submitters' tables.
"""

from sqlalchemy import BigInteger, Boolean, Column, Float, ForeignKey, Index, Integer, Text, false

from .base import Base


class PlayerORM(Base):
    """
    SQLAlchemy ORM model representing a player.

    Attributes:
        id (int): Primary key, auto-incrementing.
        name (str): The player's name. Unique as an exact match; lookups by name are case-insensitive.
        banned (bool): Banned players cannot have records on the list.
        score (float): Aggregate score over the player's approved records.
    """
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True, comment="Player name as first entered.")
    banned = Column(Boolean, nullable=False, default=False, server_default=false())
    score = Column(Float, nullable=False, default=0.0, server_default="0", comment="Sum of the scores of this player's approved records.")

    def __repr__(self) -> str:
        return f"<PlayerORM(id={self.id}, name='{self.name}', banned={self.banned}, score={self.score})>"


class PlayerClaimORM(Base):
    """
    SQLAlchemy ORM model representing a user's claim on a player.

    Attributes:
        id (int): Primary key, auto-incrementing.
        member_id (int): Identifier of the claiming user account.
        player (int): The claimed player.
        verified (bool): Whether the claim was verified by list staff.
        lock_submissions (bool): Whether the claimant asked to lock submissions for the player.
    """
    __tablename__ = "player_claims"

    id = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(BigInteger, nullable=False)
    player = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False)
    verified = Column(Boolean, nullable=False, default=False, server_default=false())
    lock_submissions = Column(Boolean, nullable=False, default=False, server_default=false())

    __table_args__ = (
        Index("idx_player_claims_player", "player"),
    )

    def __repr__(self) -> str:
        return f"<PlayerClaimORM(id={self.id}, member_id={self.member_id}, player={self.player}, verified={self.verified})>"


class SubmitterORM(Base):
    """
    SQLAlchemy ORM model representing the (anonymous) identity behind an open submission.
    """
    __tablename__ = "submitters"

    submitter_id = Column(Integer, primary_key=True, autoincrement=True)
    banned = Column(Boolean, nullable=False, default=False, server_default=false())

    def __repr__(self) -> str:
        return f"<SubmitterORM(submitter_id={self.submitter_id}, banned={self.banned})>"
