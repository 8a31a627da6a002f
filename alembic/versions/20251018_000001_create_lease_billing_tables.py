"""Create lease billing tables

Revision ID: 20251018_000001
Revises: None
Create Date: 2025-10-18

Creates tenants, properties, applications, bookings, leases, bills,
notifications and scheduled_reminders.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20251018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REQUEST_STATUSES = ('none', 'pending', 'approved', 'rejected')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create the lease billing tables."""
    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('id_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('landlord_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column(
            'status',
            sa.Enum('available', 'occupied', name='property_status'),
            nullable=False,
            server_default='available'
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_properties_landlord_id', 'properties', ['landlord_id'])

    for table in ('applications', 'bookings'):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('tenant_id', sa.Integer(), nullable=False),
            sa.Column('property_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(length=50), nullable=False, server_default='pending'),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id'),
            sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name=f'fk_{table}_tenant_id'),
            sa.ForeignKeyConstraint(['property_id'], ['properties.id'], name=f'fk_{table}_property_id'),
        )
        op.create_index(f'ix_{table}_tenant_id', table, ['tenant_id'])
        op.create_index(f'ix_{table}_property_id', table, ['property_id'])

    op.create_table(
        'leases',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('landlord_id', sa.Integer(), nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('active', 'pending_end', 'ended', name='lease_status'),
            nullable=False,
            server_default='active'
        ),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('contract_end_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('security_deposit', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('security_deposit_used', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('late_payment_fee', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('wifi_due_day', sa.Integer(), nullable=True),
        sa.Column('contract_url', sa.String(length=500), nullable=True),
        sa.Column('renewal_requested', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'renewal_status',
            sa.Enum(*REQUEST_STATUSES, name='renewal_status'),
            nullable=False,
            server_default='none'
        ),
        sa.Column('renewal_signing_date', sa.Date(), nullable=True),
        sa.Column(
            'end_request_status',
            sa.Enum(*REQUEST_STATUSES, name='end_request_status'),
            nullable=False,
            server_default='none'
        ),
        sa.Column('end_requested_at', sa.DateTime(), nullable=True),
        sa.Column('end_request_date', sa.Date(), nullable=True),
        sa.Column('end_request_reason', sa.Text(), nullable=True),
        sa.Column('termination_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], name='fk_leases_property_id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_leases_tenant_id'),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], name='fk_leases_application_id'),
    )
    op.create_index('ix_leases_property_id', 'leases', ['property_id'])
    op.create_index('ix_leases_tenant_id', 'leases', ['tenant_id'])
    op.create_index('ix_leases_landlord_id', 'leases', ['landlord_id'])
    op.create_index('ix_leases_status', 'leases', ['status'])

    op.create_table(
        'bills',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('landlord_id', sa.Integer(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'pending_confirmation', 'paid', name='bill_status'),
            nullable=False,
            server_default='pending'
        ),
        sa.Column('bills_description', sa.String(length=255), nullable=True),
        sa.Column('rent_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('advance_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('security_deposit_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('water_bill', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('electrical_bill', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('wifi_bill', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('other_bills', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('amount_paid', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('is_move_in_payment', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_renewal_payment', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['leases.id'],
            name='fk_bills_lease_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_bills_tenant_id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], name='fk_bills_property_id'),
    )

    # Create indexes for common queries
    op.create_index('ix_bills_lease_id', 'bills', ['lease_id'])
    op.create_index('ix_bills_tenant_id', 'bills', ['tenant_id'])
    op.create_index('ix_bills_landlord_id', 'bills', ['landlord_id'])
    op.create_index('ix_bills_due_date', 'bills', ['due_date'])
    op.create_index('ix_bills_status', 'bills', ['status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('link', sa.String(length=255), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])

    op.create_table(
        'scheduled_reminders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('send_date', sa.Date(), nullable=False),
        sa.Column('sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['leases.id'],
            name='fk_scheduled_reminders_lease_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_scheduled_reminders_lease_id', 'scheduled_reminders', ['lease_id'])
    op.create_index('ix_scheduled_reminders_send_date', 'scheduled_reminders', ['send_date'])


def downgrade() -> None:
    """Drop the lease billing tables."""
    op.drop_table('scheduled_reminders')
    op.drop_table('notifications')
    op.drop_table('bills')
    op.drop_table('leases')
    op.drop_table('bookings')
    op.drop_table('applications')
    op.drop_table('properties')
    op.drop_table('tenants')
