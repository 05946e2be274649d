"""
Block store.

Shared persistence for the gap filler and the window validator.
Every call runs in its own session and transaction, so the two
callers never share a session.
"""

from typing import Protocol

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chainsync.repositories.block_repository import BlockRepository, to_block
from chainsync.services.blockchain.types import Block
from chainsync.utils.db_decorators import with_auto_commit
from chainsync.utils.exceptions import BlockWriteError


class BlockStore(Protocol):
    """Persistence contract consumed by the sync engine."""

    async def missing_block_numbers(self, start: int, end: int) -> list[int]:
        """Return ascending numbers in [start, end] that are not stored."""
        ...

    async def block_exists(self, number: int) -> bool:
        """Return True if a block is stored at this number."""
        ...

    async def get_block(self, number: int) -> Block | None:
        """Return the stored block at this number, if any."""
        ...

    async def create_or_update_block(self, block: Block) -> int:
        """Persist the block, replacing any other version at its height."""
        ...

    async def set_blocks_status(self, chain_head: int, window_size: int) -> None:
        """Flag blocks deeper than the window below head as final."""
        ...


@with_auto_commit
async def _write_block(session: AsyncSession, block: Block) -> int:
    return await BlockRepository(session).create_or_update(block)


@with_auto_commit
async def _mark_final(session: AsyncSession, last_final_number: int) -> None:
    await BlockRepository(session).mark_final(last_final_number)


class SqlBlockStore:
    """BlockStore backed by SQLAlchemy async sessions."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize store.

        Args:
            session_maker: Factory for per-call sessions
        """
        self._session_maker = session_maker

    async def missing_block_numbers(self, start: int, end: int) -> list[int]:
        async with self._session_maker() as session:
            return await BlockRepository(session).missing_numbers(start, end)

    async def block_exists(self, number: int) -> bool:
        async with self._session_maker() as session:
            return await BlockRepository(session).exists(number=number)

    async def get_block(self, number: int) -> Block | None:
        async with self._session_maker() as session:
            record = await BlockRepository(session).get_by_number(number)
            return to_block(record) if record is not None else None

    async def create_or_update_block(self, block: Block) -> int:
        """
        Insert or replace a block atomically per block number.

        A concurrent insert of the same number surfaces as an
        IntegrityError on the unique index; the write is retried once,
        at which point the competing row is visible and gets updated.

        Args:
            block: Block to persist

        Returns:
            Row ID of the stored block

        Raises:
            BlockWriteError: If the block could not be persisted
        """
        for attempt in range(2):
            try:
                async with self._session_maker() as session:
                    return await _write_block(session, block)
            except IntegrityError as e:
                if attempt == 0:
                    logger.debug(
                        f"[BlockStore] Concurrent insert at block {block.number}, retrying"
                    )
                    continue
                raise BlockWriteError(block.number, str(e)) from e
            except SQLAlchemyError as e:
                raise BlockWriteError(block.number, str(e)) from e

        # Unreachable: the loop either returns or raises
        raise BlockWriteError(block.number, "write retries exhausted")

    async def set_blocks_status(self, chain_head: int, window_size: int) -> None:
        async with self._session_maker() as session:
            await _mark_final(session, chain_head - window_size)
