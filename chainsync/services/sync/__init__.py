"""
Synchronization engine.

Keeps the block store consistent with the node:
- GapFiller: idempotent backfill of missing block numbers
- WindowValidator: re-checks recent blocks and heals shallow reorgs
- SyncLoop: runs both until shutdown
"""

from .gap_filler import GapFiller, populate_missing_blocks, retrieve_and_update_blocks
from .sync_loop import SyncConfig, SyncLoop
from .validation_window import ValidationOutcome, ValidationWindow
from .window_validator import WindowValidator

__all__ = [
    "GapFiller",
    "populate_missing_blocks",
    "retrieve_and_update_blocks",
    "SyncConfig",
    "SyncLoop",
    "ValidationOutcome",
    "ValidationWindow",
    "WindowValidator",
]
