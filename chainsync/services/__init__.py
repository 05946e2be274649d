"""
Services.

Sync engine, block store and transformer hooks.
"""

from chainsync.services.block_store import BlockStore, SqlBlockStore

__all__ = [
    "BlockStore",
    "SqlBlockStore",
]
