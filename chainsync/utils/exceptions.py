"""
Exception handling utilities.

Defines categorized exception types for proper error handling.
"""

from sqlalchemy.exc import SQLAlchemyError
from web3.exceptions import Web3Exception


class ChainSyncError(Exception):
    """Base exception for sync engine errors."""
    pass


class SyncPreconditionError(ChainSyncError):
    """Raised when the sync loop cannot start on a consistent premise."""
    pass


class BlockchainTimeoutError(ChainSyncError):
    """Raised when blockchain RPC call times out."""
    pass


class BlockError(ChainSyncError):
    """Error tied to a single block number."""

    def __init__(self, block_number: int, message: str) -> None:
        self.block_number = block_number
        super().__init__(f"Block {block_number}: {message}")


class BlockFetchError(BlockError):
    """Raised when a block cannot be fetched or decoded from the node."""
    pass


class BlockWriteError(BlockError):
    """Raised when a block cannot be persisted."""
    pass


# Exception categories based on handling strategy

# Must log but can continue - the block is retried on the next pass
MUST_LOG = (
    SQLAlchemyError,
    Web3Exception,
    BlockchainTimeoutError,
    BlockFetchError,
    BlockWriteError,
)

# Must raise - the process cannot continue
MUST_RAISE = (
    SyncPreconditionError,
)


def must_log(exc: Exception) -> bool:
    """
    Check if exception must be logged and the work item skipped.

    Args:
        exc: Exception to check

    Returns:
        True if exception is recoverable per block
    """
    return isinstance(exc, MUST_LOG)


def must_raise(exc: Exception) -> bool:
    """
    Check if exception must be raised.

    Args:
        exc: Exception to check

    Returns:
        True if exception is fatal
    """
    return isinstance(exc, MUST_RAISE)
