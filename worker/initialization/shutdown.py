"""
Worker Initialization - Shutdown Module.

Module: shutdown.py
Handles graceful shutdown of the worker.
Closes RPC threads and database connections.
"""

from loguru import logger

from worker.initialization.services import WorkerServices


async def shutdown_handler(services: WorkerServices) -> None:
    """Handle graceful shutdown."""
    logger.info("Graceful shutdown initiated...")

    try:
        services.source.close()
        logger.info("RPC executor stopped")
    except Exception as e:
        logger.warning(f"Error stopping RPC executor: {e}")

    try:
        await services.engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Error closing database: {e}")

    logger.info("Graceful shutdown complete")
