"""
Worker Initialization - Services Module.

Module: services.py
Creates the database engine, block store and chain source.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from chainsync.config.database import create_engine, create_session_maker
from chainsync.config.settings import Settings
from chainsync.services.block_store import SqlBlockStore
from chainsync.services.blockchain.chain_source import Web3ChainSource


@dataclass
class WorkerServices:
    """Long-lived collaborators owned by the worker process."""

    engine: AsyncEngine
    store: SqlBlockStore
    source: Web3ChainSource


def initialize_all_services(settings: Settings) -> WorkerServices:
    """Wire engine, store and chain source from settings."""
    engine = create_engine(settings)
    store = SqlBlockStore(create_session_maker(engine))
    source = Web3ChainSource.from_url(
        settings.rpc_url,
        request_timeout=settings.rpc_timeout,
        timeout=float(settings.rpc_timeout),
        max_retries=settings.rpc_max_retries,
    )
    logger.info(f"Block store ready ({engine.url.render_as_string(hide_password=True)})")
    return WorkerServices(engine=engine, store=store, source=source)
