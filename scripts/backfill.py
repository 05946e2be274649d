#!/usr/bin/env python3
"""
One-shot backfill.

Runs a single gap filler pass from the given block up to the current
head and exits. The sync worker keeps running passes continuously;
this script is for seeding a fresh database.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from chainsync.config.settings import get_settings
from chainsync.services.sync.gap_filler import populate_missing_blocks
from worker.initialization.services import initialize_all_services
from worker.initialization.shutdown import shutdown_handler

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def backfill(starting_block_number: int) -> int:
    """Fill missing blocks once; return how many were written."""
    services = initialize_all_services(get_settings())
    try:
        return await populate_missing_blocks(
            services.source, services.store, starting_block_number
        )
    finally:
        await shutdown_handler(services)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("-s", "--starting-block-number", type=int, default=0)
    args = parser.parse_args()

    filled = asyncio.run(backfill(args.starting_block_number))
    logger.success(f"Backfill complete: {filled} blocks written")
