"""initial schema: warehouse, writeoffs, notes, orders, bouquets

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'warehouse',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('flower', sa.String(255), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount >= 0', name='ck_warehouse_amount_non_negative'),
        sa.PrimaryKeyConstraint('id', name='pk_warehouse'),
        sa.UniqueConstraint('flower', name='uq_warehouse_flower'),
    )

    op.create_table(
        'writeoffs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('flower', sa.String(255), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_writeoffs'),
    )
    op.create_index('ix_writeoffs_date_time', 'writeoffs', ['date_time'])

    op.create_table(
        'notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_notes'),
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('from', sa.Text(), nullable=False),
        sa.Column('to', sa.Text(), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.Column('time_from', sa.String(5), nullable=True),
        sa.Column('time_to', sa.String(5), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='Новый'),
        sa.Column('pickup', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('showcase', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
    )
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_date_time', 'orders', ['date_time'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('flower', sa.String(255), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'],
            name='fk_order_items_order_id_orders',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_order_items'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'bouquets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.Column('photo', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_bouquets'),
    )

    op.create_table(
        'bouquet_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('bouquet_id', sa.Integer(), nullable=False),
        sa.Column('flower', sa.String(255), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ['bouquet_id'], ['bouquets.id'],
            name='fk_bouquet_items_bouquet_id_bouquets',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_bouquet_items'),
    )
    op.create_index('ix_bouquet_items_bouquet_id', 'bouquet_items', ['bouquet_id'])


def downgrade() -> None:
    op.drop_index('ix_bouquet_items_bouquet_id', table_name='bouquet_items')
    op.drop_table('bouquet_items')
    op.drop_table('bouquets')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_date_time', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_table('orders')
    op.drop_table('notes')
    op.drop_index('ix_writeoffs_date_time', table_name='writeoffs')
    op.drop_table('writeoffs')
    op.drop_table('warehouse')
