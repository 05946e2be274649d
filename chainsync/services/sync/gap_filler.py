"""
Gap filler.

Backfills every block number in [start, head] that storage lacks.
Best effort: a block that cannot be fetched or written is skipped and
stays missing until the next pass.
"""

import asyncio

from loguru import logger

from chainsync.config.constants import MISSING_BLOCKS_CHUNK_SIZE
from chainsync.services.block_store import BlockStore
from chainsync.services.blockchain.chain_source import ChainSource
from chainsync.utils.exceptions import must_log


async def populate_missing_blocks(
    source: ChainSource,
    store: BlockStore,
    starting_block_number: int,
    chunk_size: int = MISSING_BLOCKS_CHUNK_SIZE,
) -> int:
    """
    Fetch and persist all missing blocks from the start up to the head.

    The missing set is requested one chunk of block numbers at a time,
    lowest chunk first, so memory and per-query work stay bounded.
    Running it twice with no chain growth in between is a no-op on
    the second run.

    Args:
        source: Node to fetch blocks from
        store: Block store to fill
        starting_block_number: Lowest block number to backfill
        chunk_size: Block numbers per missing-set query

    Returns:
        Number of blocks successfully filled
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")

    head = await source.last_block_number()
    filled = 0
    found = 0

    for chunk_start in range(starting_block_number, head + 1, chunk_size):
        chunk_end = min(chunk_start + chunk_size - 1, head)
        missing = await store.missing_block_numbers(chunk_start, chunk_end)
        if not missing:
            continue

        found += len(missing)
        logger.info(
            f"[GapFiller] Backfilling {len(missing)} blocks "
            f"({chunk_start} -> {chunk_end}, head {head})"
        )
        filled += await retrieve_and_update_blocks(source, store, missing)

    if not found:
        logger.debug(f"[GapFiller] No missing blocks in {starting_block_number} -> {head}")
    return filled


async def retrieve_and_update_blocks(
    source: ChainSource,
    store: BlockStore,
    block_numbers: list[int],
) -> int:
    """
    Fetch each block number and create-or-update it in the store.

    Args:
        source: Node to fetch blocks from
        store: Block store to write
        block_numbers: Block numbers, processed in the given order

    Returns:
        Number of blocks written
    """
    filled = 0
    failed: list[int] = []

    for number in block_numbers:
        try:
            block = await source.block_by_number(number)
            await store.create_or_update_block(block)
            filled += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not must_log(e):
                logger.exception(f"[GapFiller] Unexpected error at block {number}: {e}")
            else:
                logger.warning(f"[GapFiller] Skipping block {number}: {e}")
            failed.append(number)

    if failed:
        logger.warning(
            f"[GapFiller] {len(failed)} blocks left missing, retried next pass "
            f"(first: {failed[0]})"
        )
    logger.info(f"[GapFiller] Filled {filled}/{len(block_numbers)} blocks")
    return filled


class GapFiller:
    """Backfill pass bound to one source, store and starting block."""

    def __init__(
        self,
        source: ChainSource,
        store: BlockStore,
        starting_block_number: int = 0,
        chunk_size: int = MISSING_BLOCKS_CHUNK_SIZE,
    ) -> None:
        self.source = source
        self.store = store
        self.starting_block_number = starting_block_number
        self.chunk_size = chunk_size

    async def populate_missing_blocks(self) -> int:
        """Run one backfill pass over [starting_block_number, head]."""
        return await populate_missing_blocks(
            self.source, self.store, self.starting_block_number, self.chunk_size
        )
