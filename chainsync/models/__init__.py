"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from chainsync.models.base import Base
from chainsync.models.block import (
    BlockRecord,
    LogRecord,
    ReceiptRecord,
    TransactionRecord,
)

__all__ = [
    "Base",
    "BlockRecord",
    "TransactionRecord",
    "ReceiptRecord",
    "LogRecord",
]
