"""
Position manager for the demonlist.

The positions of all demons always form the range 1..N without gaps or
duplicates. Every write to ``demons.position`` goes through this module, and
every multi-step mutation ("validate, shift, write") runs inside
``position_mutation`` so concurrent mutations cannot interleave.
"""
import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import func, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from demonlist.errors import InvalidPosition
from demonlist.models.demon_orm import DemonORM
from demonlist.utils.db_session import dialect_name, get_db_session_context_manager

logger = logging.getLogger(__name__)

# Demons being moved are parked here so the shift cannot touch them.
PARKING_POSITION = -1

_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def _position_lock() -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    lock = _locks.get(loop)
    if lock is None:
        lock = _locks[loop] = asyncio.Lock()
    return lock


async def _lock_demons_table(session: AsyncSession) -> None:
    """Take the table lock that serializes position writers across processes (PostgreSQL only)."""
    if dialect_name(session) == "postgresql":
        await session.execute(text("LOCK TABLE demons IN SHARE ROW EXCLUSIVE MODE"))


@asynccontextmanager
async def position_mutation(existing_session: Optional[AsyncSession] = None) -> AsyncGenerator[AsyncSession, None]:
    """
    Unit of work for operations that change demon positions.

    Holds an in-process lock for the duration of the block and, on
    PostgreSQL, a table lock on ``demons`` that lasts until the transaction
    ends. Position reads made inside the block stay valid for the writes made
    inside it. When no ``existing_session`` is given the block is committed on
    exit and rolled back on error; a caller-provided session is left for the
    caller to commit.
    """
    async with _position_lock():
        async with get_db_session_context_manager(existing_session) as session:
            await _lock_demons_table(session)
            yield session


async def max_position(session: AsyncSession) -> int:
    """Gets the current max position a demon has, or 0 if there are no demons."""
    result = await session.execute(select(func.max(DemonORM.position)))
    return result.scalar_one_or_none() or 0


async def validate_position(position: int, session: AsyncSession) -> None:
    """
    Checks that a new demon may be inserted at ``position``.

    To prevent holes in the list the position must lie between 1 and the
    current last position + 1, inclusive.
    """
    maximal = await max_position(session) + 1

    if position < 1 or position > maximal:
        raise InvalidPosition(maximal=maximal)


async def shift_down(starting_at: int, session: AsyncSession) -> None:
    """Increments the position of all demons at ``starting_at`` or below by one."""
    logger.info(f"Shifting down all demons, starting at {starting_at}")

    await session.execute(
        update(DemonORM)
        .where(DemonORM.position >= starting_at)
        .values(position=DemonORM.position + 1)
    )


async def shift_up(starting_after: int, session: AsyncSession) -> None:
    """Decrements the position of all demons below ``starting_after`` by one, closing the gap at it."""
    logger.info(f"Shifting up all demons, starting after {starting_after}")

    await session.execute(
        update(DemonORM)
        .where(DemonORM.position > starting_after)
        .values(position=DemonORM.position - 1)
    )


async def move(demon_id: int, current: int, to: int, session: AsyncSession) -> None:
    """
    Moves the demon ``demon_id`` from position ``current`` to ``to``.

    A move never changes the number of demons, so the legal range is 1 to the
    current last position.
    """
    maximal = await max_position(session)

    if to < 1 or to > maximal:
        raise InvalidPosition(maximal=maximal)

    if to == current:
        return

    logger.info(f"Moving demon {demon_id} from {current} to {to}")

    await session.execute(
        update(DemonORM).where(DemonORM.id == demon_id).values(position=PARKING_POSITION)
    )

    if to > current:
        await session.execute(
            update(DemonORM)
            .where(DemonORM.position > current, DemonORM.position <= to)
            .values(position=DemonORM.position - 1)
        )
    else:
        await session.execute(
            update(DemonORM)
            .where(DemonORM.position >= to, DemonORM.position < current)
            .values(position=DemonORM.position + 1)
        )

    await session.execute(
        update(DemonORM).where(DemonORM.id == demon_id).values(position=to)
    )
