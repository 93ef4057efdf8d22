"""Initial migration

Revision ID: 001
Revises: 
Create Date: 2025-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create customers table
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('phone', sa.String(32)),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # Create tables table
    op.create_table(
        'tables',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('table_number', sa.String(50), unique=True, nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('zone', sa.String(50), nullable=False, server_default='Main'),
        sa.Column('base_price', sa.Numeric(8, 2), nullable=False, server_default='0.00'),
        sa.Column('surcharge', sa.Numeric(8, 2), nullable=False, server_default='0.00'),
        sa.CheckConstraint('capacity > 0', name='ck_tables_capacity_positive'),
        sa.CheckConstraint('base_price >= 0', name='ck_tables_base_price_non_negative'),
        sa.CheckConstraint('surcharge >= 0', name='ck_tables_surcharge_non_negative'),
    )

    # Create business_hours table
    op.create_table(
        'business_hours',
        sa.Column('day_of_week', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('open_time', sa.Time(), nullable=False),
        sa.Column('close_time', sa.Time(), nullable=False),
        sa.CheckConstraint('day_of_week BETWEEN 1 AND 7', name='ck_business_hours_day'),
    )

    # Create reservation_policies table
    op.create_table(
        'reservation_policies',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('policy_type', sa.String(50), unique=True, nullable=False),
        sa.Column('hours_before', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text()),
    )

    # Create reservations table (timestamps are naive UTC)
    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('reference_id', sa.String(32), unique=True, nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('contact', sa.String(255), nullable=False),
        sa.Column('table_id', sa.Integer(), sa.ForeignKey('tables.id'), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='confirmed'),
        sa.Column('notes', sa.Text()),
        sa.Column('reminder_sent', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('modified_at', sa.DateTime(), nullable=False),
    )

    # Create indexes
    op.create_index('ix_customers_email', 'customers', ['email'])
    op.create_index('ix_reservations_customer_id', 'reservations', ['customer_id'])
    op.create_index('ix_reservations_date_time', 'reservations', ['date_time'])

    # At most one active reservation per table and minute
    op.create_index(
        'uq_reservations_active_slot',
        'reservations',
        ['table_id', 'date_time'],
        unique=True,
        postgresql_where=sa.text("status IN ('confirmed', 'seated')"),
        sqlite_where=sa.text("status IN ('confirmed', 'seated')"),
    )


def downgrade() -> None:
    op.drop_index('uq_reservations_active_slot', table_name='reservations')
    op.drop_table('reservations')
    op.drop_table('reservation_policies')
    op.drop_table('business_hours')
    op.drop_table('tables')
    op.drop_table('customers')
