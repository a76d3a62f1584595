"""initial demonlist schema

Revision ID: 3f9a1c2d7e10
Revises:
Create Date: 2026-10-16 12:00:00.000000

Creates players, submitters, player claims, demons with their creators, and
records with their notes, plus the two enum types they use.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "3f9a1c2d7e10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DIFFICULTIES = ("silent", "legendary", "extreme", "mythical", "insane", "hard", "medium", "easy", "beginner")
RECORD_STATUSES = ("submitted", "approved", "rejected", "under consideration")

level_difficulty = postgresql.ENUM(*DIFFICULTIES, name="level_difficulty", create_type=False)
record_status = postgresql.ENUM(*RECORD_STATUSES, name="record_status", create_type=False)


def upgrade() -> None:
    bind = op.get_bind()
    level_difficulty.create(bind, checkfirst=True)
    record_status.create(bind, checkfirst=True)

    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False, unique=True, comment="Player name as first entered."),
        sa.Column("banned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("score", sa.Float(), nullable=False, server_default="0",
                  comment="Sum of the scores of this player's approved records."),
    )

    op.create_table(
        "submitters",
        sa.Column("submitter_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("banned", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "player_claims",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("member_id", sa.BigInteger(), nullable=False),
        sa.Column("player", sa.Integer(), sa.ForeignKey("players.id", ondelete="CASCADE"), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("lock_submissions", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("idx_player_claims_player", "player_claims", ["player"])

    op.create_table(
        "demons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("position", sa.SmallInteger(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("requirement", sa.SmallInteger(), nullable=False),
        sa.Column("difficulty", level_difficulty, nullable=False),
        sa.Column("video", sa.String(200), nullable=True),
        sa.Column("thumbnail", sa.Text(), nullable=False, server_default=""),
        sa.Column("level_id", sa.BigInteger(), nullable=True),
        sa.Column("publisher", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("verifier", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
    )
    op.create_index("idx_demons_position", "demons", ["position"])

    op.create_table(
        "creators",
        sa.Column("demon", sa.Integer(), sa.ForeignKey("demons.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("creator", sa.Integer(), sa.ForeignKey("players.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("progress", sa.SmallInteger(), nullable=False),
        sa.Column("status", record_status, nullable=False),
        sa.Column("enjoyment", sa.SmallInteger(), nullable=True),
        sa.Column("video", sa.String(200), nullable=True),
        sa.Column("raw_footage", sa.Text(), nullable=True),
        sa.Column("player", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("demon", sa.Integer(), sa.ForeignKey("demons.id", ondelete="CASCADE"), nullable=False),
        sa.Column("submitter", sa.Integer(), sa.ForeignKey("submitters.submitter_id"), nullable=True),
        sa.CheckConstraint("progress BETWEEN 0 AND 100", name="ck_records_progress"),
        sa.CheckConstraint("enjoyment BETWEEN 0 AND 10", name="ck_records_enjoyment"),
    )
    op.create_index("idx_records_player_status", "records", ["player", "status"])
    op.create_index("idx_records_demon", "records", ["demon"])

    op.create_table(
        "record_notes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("record", sa.Integer(), sa.ForeignKey("records.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_record_notes_record", "record_notes", ["record"])


def downgrade() -> None:
    op.drop_index("idx_record_notes_record", table_name="record_notes")
    op.drop_table("record_notes")
    op.drop_index("idx_records_demon", table_name="records")
    op.drop_index("idx_records_player_status", table_name="records")
    op.drop_table("records")
    op.drop_table("creators")
    op.drop_index("idx_demons_position", table_name="demons")
    op.drop_table("demons")
    op.drop_index("idx_player_claims_player", table_name="player_claims")
    op.drop_table("player_claims")
    op.drop_table("submitters")
    op.drop_table("players")

    bind = op.get_bind()
    record_status.drop(bind, checkfirst=True)
    level_difficulty.drop(bind, checkfirst=True)
