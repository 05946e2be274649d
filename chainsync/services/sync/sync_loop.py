"""
Sync loop.

Drives continuous synchronization:
1. Checks the node head once at startup (fatal if unusable)
2. Keeps exactly one gap filler pass running in the background,
   relaunching it as soon as the previous pass completes, or after
   a backoff when the pass raised
3. Runs the window validator on every timer tick, inline, so
   validations never overlap
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from chainsync.config.constants import (
    BLOCKCHAIN_RETRY_DELAY_BASE,
    DEFAULT_POLLING_INTERVAL_SECONDS,
    DEFAULT_STARTING_BLOCK_NUMBER,
    DEFAULT_VALIDATION_WINDOW,
)
from chainsync.config.settings import Settings
from chainsync.services.block_store import BlockStore
from chainsync.services.blockchain.chain_source import ChainSource
from chainsync.services.sync.gap_filler import GapFiller
from chainsync.services.sync.validation_window import ValidationWindow
from chainsync.services.sync.window_validator import WindowValidator
from chainsync.utils.exceptions import SyncPreconditionError


@dataclass(frozen=True)
class SyncConfig:
    """Parameters of one sync loop."""

    starting_block_number: int = DEFAULT_STARTING_BLOCK_NUMBER
    polling_interval: float = DEFAULT_POLLING_INTERVAL_SECONDS
    validation_window: int = DEFAULT_VALIDATION_WINDOW

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        starting_block_number: int | None = None,
    ) -> "SyncConfig":
        """
        Build config from settings, with an optional start override.

        Args:
            settings: Application settings
            starting_block_number: Overrides settings when given

        Returns:
            Sync configuration
        """
        if starting_block_number is None:
            starting_block_number = settings.starting_block_number
        return cls(
            starting_block_number=starting_block_number,
            polling_interval=settings.polling_interval,
            validation_window=settings.validation_window,
        )


class SyncLoop:
    """
    Orchestrates backfill and window validation until stopped.

    Only one gap filler pass is ever in flight: a new one is created
    only after the previous task's result has been consumed.
    """

    def __init__(
        self,
        source: ChainSource,
        store: BlockStore,
        config: SyncConfig,
        report: Callable[[ValidationWindow], None] | None = None,
    ) -> None:
        """
        Initialize loop.

        Args:
            source: Node to sync from
            store: Shared block store
            config: Sync parameters
            report: Sink for each validation window (defaults to logging it)
        """
        self.source = source
        self.store = store
        self.config = config
        self.report = report or ValidationWindow.log
        self.gap_filler = GapFiller(source, store, config.starting_block_number)
        self.validator = WindowValidator(
            source,
            store,
            window_size=config.validation_window,
            starting_block_number=config.starting_block_number,
        )

        self.tick_count = 0
        self.fill_pass_count = 0
        self.blocks_filled = 0
        self.fill_failures = 0
        self.last_window: ValidationWindow | None = None

        self._stop_event = asyncio.Event()
        self._fill_task: asyncio.Task[int] | None = None
        self._next_fill_at: float | None = None

    @property
    def is_filling(self) -> bool:
        return self._fill_task is not None and not self._fill_task.done()

    async def check_preconditions(self) -> int:
        """
        Verify the node is usable for syncing from the configured start.

        Returns:
            Current chain head

        Raises:
            SyncPreconditionError: If the head is 0 or below the start
        """
        head = await self.source.last_block_number()
        if head == 0:
            raise SyncPreconditionError("node initial state sync not finished (head is 0)")
        if self.config.starting_block_number > head:
            raise SyncPreconditionError(
                f"starting block number {self.config.starting_block_number} "
                f"> current block number {head}"
            )
        return head

    async def run(self) -> None:
        """
        Run until stop() is called.

        Raises:
            SyncPreconditionError: Before the loop starts, if the node is unusable
        """
        head = await self.check_preconditions()
        logger.info(
            f"[SyncLoop] Starting at head {head}: backfill from "
            f"{self.config.starting_block_number}, validating last "
            f"{self.config.validation_window} blocks every "
            f"{self.config.polling_interval}s"
        )

        loop = asyncio.get_running_loop()
        stop_waiter = asyncio.ensure_future(self._stop_event.wait())
        self._launch_gap_filler()
        next_tick = loop.time() + self.config.polling_interval

        try:
            while not self._stop_event.is_set():
                waiters = {stop_waiter}
                deadline = next_tick
                if self._next_fill_at is None:
                    waiters.add(self._fill_task)
                else:
                    deadline = min(deadline, self._next_fill_at)
                await asyncio.wait(
                    waiters,
                    timeout=max(0.0, deadline - loop.time()),
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if self._stop_event.is_set():
                    break

                if self._next_fill_at is None and self._fill_task.done():
                    if self._consume_gap_filler_result(self._fill_task):
                        self._launch_gap_filler()
                    else:
                        self._next_fill_at = loop.time() + self._fill_retry_delay()
                elif self._next_fill_at is not None and loop.time() >= self._next_fill_at:
                    self._next_fill_at = None
                    self._launch_gap_filler()

                if loop.time() >= next_tick:
                    await self._validate()
                    # A slow validation delays the next tick, ticks never queue up
                    next_tick = max(next_tick + self.config.polling_interval, loop.time())
        finally:
            stop_waiter.cancel()
            await self._cancel_gap_filler()
            logger.info(
                f"[SyncLoop] Stopped after {self.tick_count} ticks, "
                f"{self.fill_pass_count} backfill passes"
            )

    def stop(self) -> None:
        """Request shutdown; run() returns after the gap filler is cancelled."""
        self._stop_event.set()

    def _launch_gap_filler(self) -> None:
        self.fill_pass_count += 1
        self._fill_task = asyncio.create_task(
            self.gap_filler.populate_missing_blocks(),
            name=f"gap-filler-{self.fill_pass_count}",
        )

    def _consume_gap_filler_result(self, task: asyncio.Task[int]) -> bool:
        """Record a finished pass; False if it raised."""
        if task.cancelled():
            self.fill_failures += 1
            return False
        exc = task.exception()
        if exc is not None:
            # Pass-level failure, e.g. the head or missing-set query failed
            self.fill_failures += 1
            logger.error(
                f"[SyncLoop] Backfill pass failed ({self.fill_failures} in a row): {exc}"
            )
            return False
        self.fill_failures = 0
        filled = task.result()
        self.blocks_filled += filled
        if filled:
            logger.info(f"[SyncLoop] Backfill pass filled {filled} blocks")
        return True

    def _fill_retry_delay(self) -> float:
        """Exponential backoff after failed passes, capped at the tick period."""
        delay = BLOCKCHAIN_RETRY_DELAY_BASE * (2 ** (self.fill_failures - 1))
        return min(delay, self.config.polling_interval)

    async def _cancel_gap_filler(self) -> None:
        task = self._fill_task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"[SyncLoop] Backfill pass ended with error on shutdown: {e}")

    async def _validate(self) -> None:
        self.tick_count += 1
        try:
            window = await self.validator.validate_blocks()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # The head query failed; try again next tick
            logger.error(f"[SyncLoop] Validation tick {self.tick_count} failed: {e}")
            return
        self.last_window = window
        self.report(window)
