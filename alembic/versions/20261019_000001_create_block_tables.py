"""Create blocks, transactions, receipts and logs tables

Revision ID: 20261019_000001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'blocks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('number', sa.BigInteger(), nullable=False),
        sa.Column('hash', sa.String(66), nullable=False),
        sa.Column('parent_hash', sa.String(66), nullable=False),
        sa.Column('miner', sa.String(42), nullable=True),
        sa.Column('nonce', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('gas_limit', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('gas_used', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('size', sa.BigInteger(), nullable=True),
        sa.Column('extra_data', sa.Text(), nullable=True),
        sa.Column('is_final', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_blocks_number', 'blocks', ['number'], unique=True)
    op.create_index('ix_blocks_hash', 'blocks', ['hash'])
    op.create_index('ix_blocks_is_final', 'blocks', ['is_final'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('block_id', sa.Integer(), nullable=False),
        sa.Column('hash', sa.String(66), nullable=False),
        sa.Column('transaction_index', sa.Integer(), nullable=False),
        sa.Column('from_address', sa.String(42), nullable=False),
        sa.Column('to_address', sa.String(42), nullable=True),
        sa.Column('value', sa.Numeric(78, 0), nullable=False),
        sa.Column('gas', sa.BigInteger(), nullable=False),
        sa.Column('gas_price', sa.Numeric(78, 0), nullable=True),
        sa.Column('nonce', sa.BigInteger(), nullable=False),
        sa.Column('input_data', sa.Text(), nullable=False, server_default='0x'),
        sa.ForeignKeyConstraint(['block_id'], ['blocks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_transactions_block_id', 'transactions', ['block_id'])
    op.create_index('ix_transactions_hash', 'transactions', ['hash'])
    op.create_index('ix_transactions_from_address', 'transactions', ['from_address'])
    op.create_index('ix_transactions_to_address', 'transactions', ['to_address'])

    op.create_table(
        'receipts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('block_id', sa.Integer(), nullable=False),
        sa.Column('transaction_hash', sa.String(66), nullable=False),
        sa.Column('contract_address', sa.String(42), nullable=True),
        sa.Column('cumulative_gas_used', sa.BigInteger(), nullable=False),
        sa.Column('gas_used', sa.BigInteger(), nullable=False),
        sa.Column('status', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['block_id'], ['blocks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_receipts_block_id', 'receipts', ['block_id'])
    op.create_index('ix_receipts_transaction_hash', 'receipts', ['transaction_hash'])

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('receipt_id', sa.Integer(), nullable=False),
        sa.Column('block_number', sa.BigInteger(), nullable=False),
        sa.Column('transaction_hash', sa.String(66), nullable=False),
        sa.Column('log_index', sa.Integer(), nullable=False),
        sa.Column('address', sa.String(42), nullable=False),
        sa.Column('topics', sa.JSON(), nullable=False),
        sa.Column('data', sa.Text(), nullable=False, server_default='0x'),
        sa.ForeignKeyConstraint(['receipt_id'], ['receipts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_logs_receipt_id', 'logs', ['receipt_id'])
    op.create_index('ix_logs_block_number', 'logs', ['block_number'])
    op.create_index('ix_logs_address', 'logs', ['address'])


def downgrade() -> None:
    op.drop_table('logs')
    op.drop_table('receipts')
    op.drop_table('transactions')
    op.drop_table('blocks')
