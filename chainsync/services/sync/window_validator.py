"""
Window validator.

Re-fetches the most recent blocks on every tick and overwrites stored
blocks whose hash no longer matches the node (shallow reorgs).
Blocks deeper than the window are treated as final and never re-checked.
"""

import asyncio

from loguru import logger

from chainsync.config.constants import DEFAULT_VALIDATION_WINDOW
from chainsync.services.block_store import BlockStore
from chainsync.services.blockchain.chain_source import ChainSource
from chainsync.services.sync.validation_window import (
    ValidationOutcome,
    ValidationWindow,
)


class WindowValidator:
    """Validates the last ``window_size`` blocks against the node."""

    def __init__(
        self,
        source: ChainSource,
        store: BlockStore,
        window_size: int = DEFAULT_VALIDATION_WINDOW,
        starting_block_number: int = 0,
    ) -> None:
        """
        Initialize validator.

        Args:
            source: Node to compare against
            store: Block store to heal
            window_size: Number of most recent blocks to re-check
            starting_block_number: Lowest block number ever checked
        """
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        self.source = source
        self.store = store
        self.window_size = window_size
        self.starting_block_number = starting_block_number

    def window_bounds(self, head: int) -> tuple[int, int]:
        """
        Block range checked for a given head.

        Args:
            head: Current chain head

        Returns:
            (lower, upper) inclusive; lower > upper means an empty window
        """
        lower = max(self.starting_block_number, head - self.window_size + 1)
        return lower, head

    async def validate_blocks(self) -> ValidationWindow:
        """
        Re-check every block in the window and heal stale ones.

        A failed fetch or overwrite is reported as FETCH_ERROR and the
        rest of the window is still processed.

        Returns:
            Outcome per block number, ascending
        """
        head = await self.source.last_block_number()
        lower, upper = self.window_bounds(head)

        results = []
        for number in range(lower, upper + 1):
            results.append((number, await self._validate_block(number)))
        window = ValidationWindow(results=tuple(results))

        if results:
            try:
                await self.store.set_blocks_status(head, self.window_size)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"[Validator] Failed to update finality flags: {e}")

        return window

    async def _validate_block(self, number: int) -> ValidationOutcome:
        try:
            fresh = await self.source.block_by_number(number)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"[Validator] Fetch failed for block {number}: {e}")
            return ValidationOutcome.FETCH_ERROR

        try:
            stored = await self.store.get_block(number)
            if stored is not None and stored.same_identity(fresh):
                return ValidationOutcome.VALIDATED

            if stored is not None:
                logger.warning(
                    f"[Validator] Block {number} hash changed "
                    f"{stored.hash[:18]}... -> {fresh.hash[:18]}..., overwriting"
                )
            await self.store.create_or_update_block(fresh)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"[Validator] Could not heal block {number}: {e}")
            return ValidationOutcome.FETCH_ERROR

        return ValidationOutcome.INVALID
