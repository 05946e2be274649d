"""
Blockchain access.

Chain data types and the node-facing ChainSource.
"""

from .chain_source import ChainSource, Web3ChainSource
from .types import Block, Log, Receipt, Transaction

__all__ = [
    "ChainSource",
    "Web3ChainSource",
    "Block",
    "Transaction",
    "Receipt",
    "Log",
]
