"""
Chain data types.

Immutable values produced by a ChainSource and accepted by a BlockStore.
Hashes and addresses are lower-case 0x-prefixed hex strings.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Log:
    """Event log emitted during a transaction."""

    address: str
    topics: tuple[str, ...]
    data: str
    log_index: int
    block_number: int
    transaction_hash: str


@dataclass(frozen=True)
class Receipt:
    """Transaction receipt."""

    transaction_hash: str
    cumulative_gas_used: int
    gas_used: int
    contract_address: str | None = None
    status: int | None = None
    logs: tuple[Log, ...] = ()


@dataclass(frozen=True)
class Transaction:
    """Transaction included in a block."""

    hash: str
    transaction_index: int
    from_address: str
    to_address: str | None
    value: int
    gas: int
    nonce: int
    gas_price: int | None = None
    input_data: str = "0x"


@dataclass(frozen=True)
class Block:
    """
    Block at a given height.

    Two blocks with the same number but different hashes are competing
    versions of that height; the newer fetch wins.
    """

    number: int
    hash: str
    parent_hash: str
    miner: str | None = None
    nonce: str | None = None
    timestamp: int = 0
    gas_limit: int = 0
    gas_used: int = 0
    size: int | None = None
    extra_data: str | None = None
    transactions: tuple[Transaction, ...] = field(default=(), repr=False)
    receipts: tuple[Receipt, ...] = field(default=(), repr=False)

    def same_identity(self, other: "Block") -> bool:
        """True if both blocks are the same version of the same height."""
        return self.number == other.number and self.hash == other.hash
