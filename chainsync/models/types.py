"""
Standard type definitions for database models.

Provides consistent column types for chain data across all models.
"""

from sqlalchemy import Numeric, String

from chainsync.config.constants import ADDRESS_LENGTH, HASH_LENGTH, WEI_PRECISION

# 32-byte hashes (block, transaction, topics)
HashType = String(HASH_LENGTH)

# 20-byte account / contract addresses
AddressType = String(ADDRESS_LENGTH)

# Unsigned 256-bit integers in wei (value, gas price)
# Precision: 78 digits, no fractional part
WeiType = Numeric(WEI_PRECISION, 0)
