"""create expense categories

Revision ID: 8e4b2d61f0a3
Revises: 3c1f0a9d2b7e
Create Date: 2026-10-19 16:40:05.772913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8e4b2d61f0a3'
down_revision: Union[str, None] = '3c1f0a9d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the expense category budget table."""
    op.create_table(
        'expense_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('category_code', sa.String(length=30), nullable=False),
        sa.Column('category_name', sa.String(length=100), nullable=False),
        sa.Column('budget_amount', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('budget_period', sa.String(length=20), nullable=False, server_default='monthly'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('category_name'),
    )
    op.create_index(op.f('ix_expense_categories_id'), 'expense_categories', ['id'], unique=False)
    op.create_index(op.f('ix_expense_categories_category_code'), 'expense_categories', ['category_code'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_expense_categories_category_code'), table_name='expense_categories')
    op.drop_index(op.f('ix_expense_categories_id'), table_name='expense_categories')
    op.drop_table('expense_categories')
