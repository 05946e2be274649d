"""
Worker main entry point.

Syncs the block store with an Ethereum node until interrupted:

    python -m worker.main --starting-block-number 0

Expects DATABASE_URL and RPC_URL in the environment or a .env file.
"""

import argparse
import asyncio
import signal
import sys

from loguru import logger

from chainsync.config.settings import get_settings
from chainsync.services.sync.sync_loop import SyncConfig, SyncLoop
from chainsync.utils.exceptions import SyncPreconditionError
from worker.initialization.logging import setup_logging
from worker.initialization.services import initialize_all_services
from worker.initialization.shutdown import shutdown_handler


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Sync the block store with an Ethereum node.",
    )
    parser.add_argument(
        "-s",
        "--starting-block-number",
        type=int,
        default=None,
        help="Block number to start syncing from (default: STARTING_BLOCK_NUMBER or 0)",
    )
    return parser.parse_args(argv)


def install_signal_handlers(sync_loop: SyncLoop) -> None:
    """Stop the loop on SIGINT / SIGTERM."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, sync_loop.stop)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass


async def main(argv: list[str] | None = None) -> int:
    """Run the sync loop; return the process exit code."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    if args.starting_block_number is not None and args.starting_block_number < 0:
        logger.critical("--starting-block-number must be >= 0")
        return 1

    services = initialize_all_services(settings)
    config = SyncConfig.from_settings(settings, args.starting_block_number)
    sync_loop = SyncLoop(services.source, services.store, config)
    install_signal_handlers(sync_loop)

    try:
        await sync_loop.run()
    except SyncPreconditionError as e:
        logger.critical(f"Cannot start sync: {e}")
        return 1
    finally:
        await shutdown_handler(services)

    return 0


def run() -> None:
    """Console script entry point."""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Worker stopped by user (KeyboardInterrupt)")
        exit_code = 0
    except Exception as e:
        logger.exception(f"Worker crashed: {e}")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
