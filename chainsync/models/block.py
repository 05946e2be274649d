"""
Block models.

Persisted view of the canonical chain: one row per block number,
with its transactions, receipts and logs as child rows.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chainsync.models.base import Base
from chainsync.models.types import AddressType, HashType, WeiType


class BlockRecord(Base):
    """
    Canonical block at a given height.

    Invariant: at most one row per block number. A reorg replaces the
    row content (and its children), it never adds a second row.
    """

    __tablename__ = "blocks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    number: Mapped[int] = mapped_column(
        BigInteger, nullable=False, unique=True, index=True
    )
    hash: Mapped[str] = mapped_column(HashType, nullable=False, index=True)
    parent_hash: Mapped[str] = mapped_column(HashType, nullable=False)

    # Header
    miner: Mapped[str | None] = mapped_column(AddressType, nullable=True)
    nonce: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    gas_limit: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    gas_used: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    extra_data: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Older than the validation window
    is_final: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    transactions: Mapped[list["TransactionRecord"]] = relationship(
        back_populates="block",
        cascade="all, delete-orphan",
        order_by="TransactionRecord.transaction_index",
    )
    receipts: Mapped[list["ReceiptRecord"]] = relationship(
        back_populates="block",
        cascade="all, delete-orphan",
        order_by="ReceiptRecord.id",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<BlockRecord(number={self.number}, hash={self.hash[:18]}...)>"


class TransactionRecord(Base):
    """Transaction included in a stored block."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    block_id: Mapped[int] = mapped_column(
        ForeignKey("blocks.id", ondelete="CASCADE"), nullable=False, index=True
    )

    hash: Mapped[str] = mapped_column(HashType, nullable=False, index=True)
    transaction_index: Mapped[int] = mapped_column(Integer, nullable=False)
    from_address: Mapped[str] = mapped_column(AddressType, nullable=False, index=True)
    to_address: Mapped[str | None] = mapped_column(AddressType, nullable=True, index=True)
    value: Mapped[Decimal] = mapped_column(WeiType, nullable=False)
    gas: Mapped[int] = mapped_column(BigInteger, nullable=False)
    gas_price: Mapped[Decimal | None] = mapped_column(WeiType, nullable=True)
    nonce: Mapped[int] = mapped_column(BigInteger, nullable=False)
    input_data: Mapped[str] = mapped_column(Text, nullable=False, default="0x")

    block: Mapped[BlockRecord] = relationship(back_populates="transactions")


class ReceiptRecord(Base):
    """Receipt of a transaction in a stored block."""

    __tablename__ = "receipts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    block_id: Mapped[int] = mapped_column(
        ForeignKey("blocks.id", ondelete="CASCADE"), nullable=False, index=True
    )

    transaction_hash: Mapped[str] = mapped_column(HashType, nullable=False, index=True)
    contract_address: Mapped[str | None] = mapped_column(AddressType, nullable=True)
    cumulative_gas_used: Mapped[int] = mapped_column(BigInteger, nullable=False)
    gas_used: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[int | None] = mapped_column(Integer, nullable=True)

    block: Mapped[BlockRecord] = relationship(back_populates="receipts")
    logs: Mapped[list["LogRecord"]] = relationship(
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="LogRecord.log_index",
    )


class LogRecord(Base):
    """Event log emitted by a receipt."""

    __tablename__ = "logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    receipt_id: Mapped[int] = mapped_column(
        ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    block_number: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    transaction_hash: Mapped[str] = mapped_column(HashType, nullable=False)
    log_index: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(AddressType, nullable=False, index=True)
    topics: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    data: Mapped[str] = mapped_column(Text, nullable=False, default="0x")

    receipt: Mapped[ReceiptRecord] = relationship(back_populates="logs")
