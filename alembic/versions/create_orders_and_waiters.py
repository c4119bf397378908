"""create orders and waiters tables

Revision ID: create_orders_waiters
Revises:
Create Date: 2026-10-12 18:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_orders_waiters'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Enum names (not values) are stored, as SQLModel maps str enums that way
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('table_number', sa.String(), nullable=False),
        sa.Column('waiter_name', sa.String(), nullable=False),
        sa.Column('order_items', sa.Text(), nullable=False),
        sa.Column('status', sa.Enum('NEW', 'PENDING', 'COMPLETED', name='orderstatus'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('pending_start_time', sa.DateTime(), nullable=True),
        sa.Column('countdown', sa.String(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_completed_at', 'orders', ['completed_at'], unique=False)

    op.create_table(
        'waiters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('waiter_name', sa.String(), nullable=False),
        sa.Column('passkey_hash', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('waiters')
    op.drop_index('ix_orders_completed_at', table_name='orders')
    op.drop_table('orders')
    # Postgres keeps the enum type around after the table is gone
    sa.Enum(name='orderstatus').drop(op.get_bind(), checkfirst=True)
