"""create ledger and cash tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-19 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Create the ledger, cash workflow and audit tables."""
    transaction_type = sa.Enum('RECEIPT', 'PAYMENT', name='cashtransactiontype')
    transaction_status = sa.Enum('PENDING', 'APPROVED', 'CANCELLED', name='cashtransactionstatus')
    # Already created with cash_transactions
    existing_transaction_type = postgresql.ENUM('RECEIPT', 'PAYMENT', name='cashtransactiontype', create_type=False)

    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_number', sa.String(length=20), nullable=False),
        sa.Column('account_name', sa.String(length=100), nullable=False),
        sa.Column('account_type', sa.String(length=20), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('balance', sa.Numeric(15, 2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_accounts_id'), 'accounts', ['id'], unique=False)
    op.create_index(op.f('ix_accounts_account_number'), 'accounts', ['account_number'], unique=True)

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_number', sa.String(length=50), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reference_document', sa.String(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('posted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_journal_entries_id'), 'journal_entries', ['id'], unique=False)
    op.create_index(op.f('ix_journal_entries_entry_number'), 'journal_entries', ['entry_number'], unique=True)
    op.create_index(op.f('ix_journal_entries_date'), 'journal_entries', ['date'], unique=False)

    op.create_table(
        'journal_entry_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('debit', sa.Numeric(15, 2), nullable=False),
        sa.Column('credit', sa.Numeric(15, 2), nullable=False),
        sa.Column('line_number', sa.Integer(), nullable=False),
        sa.CheckConstraint('debit >= 0'),
        sa.CheckConstraint('credit >= 0'),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('journal_entry_id', 'line_number', name='_entry_line_number_uc'),
    )
    op.create_index(op.f('ix_journal_entry_lines_id'), 'journal_entry_lines', ['id'], unique=False)
    op.create_index(op.f('ix_journal_entry_lines_journal_entry_id'), 'journal_entry_lines', ['journal_entry_id'], unique=False)
    op.create_index(op.f('ix_journal_entry_lines_account_id'), 'journal_entry_lines', ['account_id'], unique=False)

    op.create_table(
        'cash_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('transaction_code', sa.String(length=50), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.Time(), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('transaction_type', transaction_type, nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=False),
        sa.Column('counterpart_name', sa.String(length=150), nullable=True),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', transaction_status, nullable=False),
        sa.Column('verified_by', sa.String(), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('journal_entry_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('amount > 0'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_cash_transactions_id'), 'cash_transactions', ['id'], unique=False)
    op.create_index(op.f('ix_cash_transactions_transaction_code'), 'cash_transactions', ['transaction_code'], unique=True)
    op.create_index(op.f('ix_cash_transactions_date'), 'cash_transactions', ['date'], unique=False)
    op.create_index(op.f('ix_cash_transactions_status'), 'cash_transactions', ['status'], unique=False)

    op.create_table(
        'daily_cash_balance',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('opening_balance', sa.Numeric(15, 2), nullable=False),
        sa.Column('cash_received', sa.Numeric(15, 2), nullable=False),
        sa.Column('cash_paid', sa.Numeric(15, 2), nullable=False),
        sa.Column('closing_balance', sa.Numeric(15, 2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_daily_cash_balance_id'), 'daily_cash_balance', ['id'], unique=False)
    op.create_index(op.f('ix_daily_cash_balance_date'), 'daily_cash_balance', ['date'], unique=True)

    op.create_table(
        'money_receipts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('receipt_no', sa.String(length=40), nullable=False),
        sa.Column('cash_transaction_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('transaction_type', existing_transaction_type, nullable=False),
        sa.Column('counterpart_name', sa.String(length=150), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['cash_transaction_id'], ['cash_transactions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cash_transaction_id'),
    )
    op.create_index(op.f('ix_money_receipts_id'), 'money_receipts', ['id'], unique=False)
    op.create_index(op.f('ix_money_receipts_receipt_no'), 'money_receipts', ['receipt_no'], unique=True)
    op.create_index(op.f('ix_money_receipts_date'), 'money_receipts', ['date'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('table_name', sa.String(), nullable=True),
        sa.Column('record_id', sa.Integer(), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)


def downgrade() -> None:
    """Drop everything created by upgrade()."""
    op.drop_table('audit_logs')
    op.drop_table('money_receipts')
    op.drop_table('daily_cash_balance')
    op.drop_table('cash_transactions')
    op.drop_table('journal_entry_lines')
    op.drop_table('journal_entries')
    op.drop_table('accounts')
    sa.Enum(name='cashtransactionstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='cashtransactiontype').drop(op.get_bind(), checkfirst=True)
