"""init_db_schema

Revision ID: 0001
Revises:
Create Date: 2025-12-06

Schema:
- user: Accounts (CUSTOMER / ORGANIZER / ADMIN) with their points balance
- event: Events with remaining seat quantity and price
- coupon: Organizer (quota) and referral (single use) coupons in one table
- ticket_transaction: Ticket purchases and their lifecycle status

Counters that are decremented concurrently carry CHECK constraints so a
broken guard can never drive them below zero.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables with final schema."""

    # User table
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('points', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('points >= 0', name='ck_user_points_non_negative'),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    # Event table
    op.create_table(
        'event',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('organizer_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price_idr', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('is_free', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['organizer_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity >= 0', name='ck_event_quantity_non_negative'),
        sa.CheckConstraint('price_idr >= 0', name='ck_event_price_non_negative'),
    )
    op.create_index('idx_event_organizer_id', 'event', ['organizer_id'])

    # Coupon table
    op.create_table(
        'coupon',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('discount_idr', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('organizer_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('used', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['organizer_id'], ['user.id']),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'quantity IS NULL OR quantity >= 0', name='ck_coupon_quantity_non_negative'
        ),
        sa.CheckConstraint('used >= 0', name='ck_coupon_used_non_negative'),
        sa.CheckConstraint('discount_idr >= 0', name='ck_coupon_discount_non_negative'),
        sa.CheckConstraint(
            "(type = 'ORGANIZER' AND organizer_id IS NOT NULL AND quantity IS NOT NULL "
            'AND user_id IS NULL) '
            "OR (type = 'REFERRAL' AND user_id IS NOT NULL AND organizer_id IS NULL)",
            name='ck_coupon_single_owner',
        ),
    )
    op.create_index(op.f('ix_coupon_code'), 'coupon', ['code'], unique=True)
    op.create_index(op.f('ix_coupon_organizer_id'), 'coupon', ['organizer_id'])
    op.create_index(op.f('ix_coupon_user_id'), 'coupon', ['user_id'])

    # Transaction table
    op.create_table(
        'ticket_transaction',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('coupon_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=40), nullable=False),
        sa.Column('total_idr', sa.Integer(), nullable=False),
        sa.Column('points_used', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.ForeignKeyConstraint(['coupon_id'], ['coupon.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('total_idr >= 0', name='ck_transaction_total_non_negative'),
        sa.CheckConstraint('points_used >= 0', name='ck_transaction_points_non_negative'),
    )
    op.create_index(op.f('ix_ticket_transaction_user_id'), 'ticket_transaction', ['user_id'])
    op.create_index(op.f('ix_ticket_transaction_event_id'), 'ticket_transaction', ['event_id'])
    op.create_index(op.f('ix_ticket_transaction_coupon_id'), 'ticket_transaction', ['coupon_id'])
    op.create_index(op.f('ix_ticket_transaction_status'), 'ticket_transaction', ['status'])
    op.create_index(
        op.f('ix_ticket_transaction_created_at'), 'ticket_transaction', ['created_at']
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('ticket_transaction')
    op.drop_table('coupon')
    op.drop_table('event')
    op.drop_table('user')
