"""
Block repository.

Data access layer for stored blocks and their child rows.
"""

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from chainsync.config.constants import MISSING_BLOCKS_CHUNK_SIZE
from chainsync.models.block import (
    BlockRecord,
    LogRecord,
    ReceiptRecord,
    TransactionRecord,
)
from chainsync.repositories.base import BaseRepository
from chainsync.services.blockchain.types import Block, Log, Receipt, Transaction


def _with_children():
    return (
        selectinload(BlockRecord.transactions),
        selectinload(BlockRecord.receipts).selectinload(ReceiptRecord.logs),
    )


def _transaction_rows(block: Block) -> list[TransactionRecord]:
    return [
        TransactionRecord(
            hash=tx.hash,
            transaction_index=tx.transaction_index,
            from_address=tx.from_address,
            to_address=tx.to_address,
            value=Decimal(tx.value),
            gas=tx.gas,
            gas_price=Decimal(tx.gas_price) if tx.gas_price is not None else None,
            nonce=tx.nonce,
            input_data=tx.input_data,
        )
        for tx in block.transactions
    ]


def _receipt_rows(block: Block) -> list[ReceiptRecord]:
    return [
        ReceiptRecord(
            transaction_hash=receipt.transaction_hash,
            contract_address=receipt.contract_address,
            cumulative_gas_used=receipt.cumulative_gas_used,
            gas_used=receipt.gas_used,
            status=receipt.status,
            logs=[
                LogRecord(
                    block_number=log.block_number,
                    transaction_hash=log.transaction_hash,
                    log_index=log.log_index,
                    address=log.address,
                    topics=list(log.topics),
                    data=log.data,
                )
                for log in receipt.logs
            ],
        )
        for receipt in block.receipts
    ]


def _apply_header(record: BlockRecord, block: Block) -> None:
    record.number = block.number
    record.hash = block.hash
    record.parent_hash = block.parent_hash
    record.miner = block.miner
    record.nonce = block.nonce
    record.timestamp = block.timestamp
    record.gas_limit = block.gas_limit
    record.gas_used = block.gas_used
    record.size = block.size
    record.extra_data = block.extra_data


def to_block(record: BlockRecord) -> Block:
    """
    Convert a loaded BlockRecord (children included) into a Block.

    Args:
        record: Block row loaded with transactions and receipts

    Returns:
        Immutable Block value
    """
    return Block(
        number=record.number,
        hash=record.hash,
        parent_hash=record.parent_hash,
        miner=record.miner,
        nonce=record.nonce,
        timestamp=record.timestamp,
        gas_limit=record.gas_limit,
        gas_used=record.gas_used,
        size=record.size,
        extra_data=record.extra_data,
        transactions=tuple(
            Transaction(
                hash=tx.hash,
                transaction_index=tx.transaction_index,
                from_address=tx.from_address,
                to_address=tx.to_address,
                value=int(tx.value),
                gas=tx.gas,
                nonce=tx.nonce,
                gas_price=int(tx.gas_price) if tx.gas_price is not None else None,
                input_data=tx.input_data,
            )
            for tx in record.transactions
        ),
        receipts=tuple(
            Receipt(
                transaction_hash=receipt.transaction_hash,
                cumulative_gas_used=receipt.cumulative_gas_used,
                gas_used=receipt.gas_used,
                contract_address=receipt.contract_address,
                status=receipt.status,
                logs=tuple(
                    Log(
                        address=log.address,
                        topics=tuple(log.topics),
                        data=log.data,
                        log_index=log.log_index,
                        block_number=log.block_number,
                        transaction_hash=log.transaction_hash,
                    )
                    for log in receipt.logs
                ),
            )
            for receipt in record.receipts
        ),
    )


class BlockRepository(BaseRepository[BlockRecord]):
    """Repository for stored blocks."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(BlockRecord, session)

    async def get_by_number(
        self, number: int, *, for_update: bool = False
    ) -> BlockRecord | None:
        """
        Get block row by number with all child rows loaded.

        Args:
            number: Block number
            for_update: Lock the row until the transaction ends

        Returns:
            Block row or None
        """
        stmt = (
            select(BlockRecord)
            .where(BlockRecord.number == number)
            .options(*_with_children())
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def numbers_in_range(self, start: int, end: int) -> set[int]:
        """
        Get stored block numbers in [start, end].

        Args:
            start: Lower bound (inclusive)
            end: Upper bound (inclusive)

        Returns:
            Set of block numbers present
        """
        result = await self.session.execute(
            select(BlockRecord.number).where(
                BlockRecord.number >= start,
                BlockRecord.number <= end,
            )
        )
        return set(result.scalars().all())

    async def count_in_range(self, start: int, end: int) -> int:
        """Count stored blocks in [start, end]."""
        result = await self.session.execute(
            select(func.count()).select_from(BlockRecord).where(
                BlockRecord.number >= start,
                BlockRecord.number <= end,
            )
        )
        return result.scalar_one()

    async def missing_numbers(
        self,
        start: int,
        end: int,
        chunk_size: int = MISSING_BLOCKS_CHUNK_SIZE,
    ) -> list[int]:
        """
        Get block numbers in [start, end] with no stored row, ascending.

        The range is scanned in chunks; a fully stored chunk costs one
        indexed count and no rows are loaded for it.

        Args:
            start: Lower bound (inclusive)
            end: Upper bound (inclusive)
            chunk_size: Block numbers per query

        Returns:
            Sorted list of missing block numbers
        """
        missing: list[int] = []
        for chunk_start in range(start, end + 1, chunk_size):
            chunk_end = min(chunk_start + chunk_size - 1, end)
            stored = await self.count_in_range(chunk_start, chunk_end)
            if stored == chunk_end - chunk_start + 1:
                continue
            if stored == 0:
                missing.extend(range(chunk_start, chunk_end + 1))
                continue
            present = await self.numbers_in_range(chunk_start, chunk_end)
            missing.extend(n for n in range(chunk_start, chunk_end + 1) if n not in present)
        return missing

    async def create_or_update(self, block: Block) -> int:
        """
        Insert the block or replace the stored version at its height.

        An identical (number, hash) pair is left untouched. A different
        hash replaces header columns and all child rows in place.

        Args:
            block: Block to persist

        Returns:
            Row ID of the block
        """
        existing = await self.get_by_number(block.number, for_update=True)

        if existing is None:
            record = BlockRecord()
            _apply_header(record, block)
            record.transactions = _transaction_rows(block)
            record.receipts = _receipt_rows(block)
            await self.add(record)
            return record.id

        if existing.hash == block.hash:
            return existing.id

        _apply_header(existing, block)
        existing.is_final = False
        existing.transactions = _transaction_rows(block)
        existing.receipts = _receipt_rows(block)
        await self.session.flush()
        return existing.id

    async def mark_final(self, last_final_number: int) -> None:
        """
        Flag blocks at or below a number as final, the rest as not final.

        Args:
            last_final_number: Highest block number considered final
        """
        await self.session.execute(
            update(BlockRecord)
            .where(BlockRecord.number <= last_final_number, BlockRecord.is_final.is_(False))
            .values(is_final=True)
        )
        await self.session.execute(
            update(BlockRecord)
            .where(BlockRecord.number > last_final_number, BlockRecord.is_final.is_(True))
            .values(is_final=False)
        )
