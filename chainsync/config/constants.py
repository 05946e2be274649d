"""
Application constants.

Centralized constants for the sync engine.
"""

# ========================================================================
# SYNC DEFAULTS
# ========================================================================

DEFAULT_STARTING_BLOCK_NUMBER = 0
DEFAULT_POLLING_INTERVAL_SECONDS = 7.0  # Validation tick period
DEFAULT_VALIDATION_WINDOW = 15  # Recent blocks re-checked on every tick
MISSING_BLOCKS_CHUNK_SIZE = 10_000  # Block numbers scanned per missing-set query

# ========================================================================
# BLOCKCHAIN CONSTANTS
# ========================================================================

# Blockchain operation timeouts (in seconds)
BLOCKCHAIN_TIMEOUT = 30.0  # Single block / receipt fetch
BLOCKCHAIN_EXECUTOR_TIMEOUT = 20.0  # Timeout for run_in_executor operations
BLOCKCHAIN_RPC_TIMEOUT = 30  # RPC provider HTTP timeout

# Blockchain retry settings
BLOCKCHAIN_MAX_RETRIES = 3
BLOCKCHAIN_RETRY_DELAY_BASE = 2  # Base delay in seconds for exponential backoff

# Worker threads for blocking web3 calls
RPC_EXECUTOR_WORKERS = 4

# ========================================================================
# STORAGE CONSTANTS
# ========================================================================

HASH_LENGTH = 66  # 0x + 32 bytes hex
ADDRESS_LENGTH = 42  # 0x + 20 bytes hex
WEI_PRECISION = 78  # Digits needed for uint256
