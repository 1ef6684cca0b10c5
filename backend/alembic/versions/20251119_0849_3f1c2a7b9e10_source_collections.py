"""Source collections: users, transporters, brokers, subscribers, activity, bookings, payments

Revision ID: 3f1c2a7b9e10
Revises: 
Create Date: 2025-11-19 08:49:17.627123

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a7b9e10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns() -> list:
    return [
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
    ]


def _booking_columns() -> list:
    return [
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('transporter_id', sa.String(), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('from_location', sa.String(), nullable=True),
        sa.Column('to_location', sa.String(), nullable=True),
        sa.Column('cost', sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
    ]


def _index_base(table: str) -> None:
    op.create_index(op.f(f'ix_{table}_id'), table, ['id'])
    op.create_index(op.f(f'ix_{table}_created_at'), table, ['created_at'])


def upgrade() -> None:
    """Create the record collections read by analytics."""
    # 1. Users
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='shipper'),
        sa.PrimaryKeyConstraint('id')
    )
    _index_base('users')
    op.create_index(op.f('ix_users_email'), 'users', ['email'])

    # 2. Transporters and brokers (approval status)
    for table in ('transporters', 'brokers'):
        op.create_table(
            table,
            *_base_columns(),
            sa.Column('user_id', sa.String(), nullable=True),
            sa.Column('name', sa.String(), nullable=True),
            sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
            sa.PrimaryKeyConstraint('id')
        )
        _index_base(table)
        op.create_index(op.f(f'ix_{table}_user_id'), table, ['user_id'])
        op.create_index(op.f(f'ix_{table}_status'), table, ['status'])

    # 3. Subscribers
    op.create_table(
        'subscribers',
        *_base_columns(),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('plan_id', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    _index_base('subscribers')
    op.create_index(op.f('ix_subscribers_user_id'), 'subscribers', ['user_id'])
    op.create_index(op.f('ix_subscribers_is_active'), 'subscribers', ['is_active'])

    # 4. User activity (windowed on timestamp, not created_at)
    op.create_table(
        'user_activity',
        *_base_columns(),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('action', sa.String(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    _index_base('user_activity')
    op.create_index(op.f('ix_user_activity_user_id'), 'user_activity', ['user_id'])
    op.create_index(op.f('ix_user_activity_timestamp'), 'user_activity', ['timestamp'])

    # 5. Bookings
    op.create_table(
        'cargo_bookings',
        *_base_columns(),
        *_booking_columns(),
        sa.Column('cargo_type', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'agri_bookings',
        *_base_columns(),
        *_booking_columns(),
        sa.Column('produce_type', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    for table in ('cargo_bookings', 'agri_bookings'):
        _index_base(table)
        op.create_index(op.f(f'ix_{table}_user_id'), table, ['user_id'])
        op.create_index(op.f(f'ix_{table}_transporter_id'), table, ['transporter_id'])
        op.create_index(op.f(f'ix_{table}_status'), table, ['status'])

    # 6. Payments
    op.create_table(
        'payments',
        *_base_columns(),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('booking_id', sa.String(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='KES'),
        sa.Column('method', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=True),
        sa.Column('reference', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reference')
    )
    _index_base('payments')
    op.create_index(op.f('ix_payments_user_id'), 'payments', ['user_id'])
    op.create_index(op.f('ix_payments_booking_id'), 'payments', ['booking_id'])
    op.create_index(op.f('ix_payments_method'), 'payments', ['method'])
    op.create_index(op.f('ix_payments_status'), 'payments', ['status'])


def downgrade() -> None:
    """Drop the record collections."""
    for table in (
        'payments',
        'agri_bookings',
        'cargo_bookings',
        'user_activity',
        'subscribers',
        'brokers',
        'transporters',
        'users',
    ):
        op.drop_table(table)
