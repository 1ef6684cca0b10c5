"""create analytics_snapshots table

Revision ID: 20251121_analytics
Revises: 3f1c2a7b9e10
Create Date: 2025-11-21 08:00:00

One row per (range, date) snapshot with the period window, its metrics and
the percent change of each metric against the previous period.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '20251121_analytics'
down_revision = '3f1c2a7b9e10'
branch_labels = None
depends_on = None

COUNT_METRICS = (
    'active_users',
    'total_users',
    'new_users',
    'total_cargo_bookings',
    'total_agri_bookings',
    'active_bookings',
    'total_cargo_bookings_all_time',
    'total_agri_bookings_all_time',
    'active_transporters',
    'active_brokers',
    'total_subscribers',
    'active_subscribers',
    'failed_payments',
)

RATE_METRICS = (
    'cargo_completion_rate',
    'agri_completion_rate',
    'cargo_completion_rate_all_time',
    'avg_completion_time',
    'total_revenue',
    'mpesa_success_rate',
    'airtel_success_rate',
    'paystack_success_rate',
    'card_success_rate',
)


def upgrade() -> None:
    """Create analytics_snapshots table."""
    op.create_table(
        'analytics_snapshots',
        sa.Column(
            'id',
            sa.String(length=32),
            nullable=False,
            comment='Composite key: <range>_<YYYY-MM-DD>'
        ),
        sa.Column('range', sa.String(length=10), nullable=False, comment='Period kind: day, week, month, year'),
        sa.Column('date', sa.Date(), nullable=False, comment='Anchor date of the period'),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        *[sa.Column(name, sa.Integer(), nullable=False, server_default='0') for name in COUNT_METRICS],
        *[sa.Column(name, sa.Float(), nullable=False, server_default='0') for name in RATE_METRICS],
        sa.Column(
            'comparisons',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default='{}',
            comment='Percent change per metric against the previous period'
        ),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index('ix_analytics_snapshots_date', 'analytics_snapshots', ['date'])
    op.create_index('ix_analytics_snapshots_created_at', 'analytics_snapshots', ['created_at'])

    # One snapshot per period
    op.create_index(
        'ix_analytics_snapshots_range_date',
        'analytics_snapshots',
        ['range', 'date'],
        unique=True
    )


def downgrade() -> None:
    """Drop analytics_snapshots table."""
    op.drop_index('ix_analytics_snapshots_range_date', table_name='analytics_snapshots')
    op.drop_index('ix_analytics_snapshots_created_at', table_name='analytics_snapshots')
    op.drop_index('ix_analytics_snapshots_date', table_name='analytics_snapshots')
    op.drop_table('analytics_snapshots')
