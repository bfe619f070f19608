"""initial booking schema

Revision ID: 4a1f2c9d7e10
Revises:
Create Date: 2026-10-19 09:12:44.381902

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4a1f2c9d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('PROVIDER', 'CUSTOMER', 'ADMIN', name='userrole')
availability_type = sa.Enum('AVAILABLE', 'UNAVAILABLE', name='availabilitytype')
booking_status = sa.Enum('PENDING', 'CONFIRMED', 'CANCELLED', 'NO_SHOW', 'COMPLETED', name='bookingstatus')
payment_method = sa.Enum('STRIPE', 'VIPPS', 'CASH', name='paymentmethod')


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Accounts and provider profiles
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'providers',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('business_name', sa.String(200), nullable=True),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('timezone', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_providers_username', 'providers', ['username'], unique=True)

    op.create_table(
        'business_hours',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('provider_id', sa.Uuid(as_uuid=True), sa.ForeignKey('providers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('is_open', sa.Boolean(), nullable=False),
        sa.Column('open_time', sa.String(5), nullable=False),
        sa.Column('close_time', sa.String(5), nullable=False),
        sa.UniqueConstraint('provider_id', 'day_of_week', name='uq_business_hours_provider_day'),
    )

    # 2. Services and staff
    op.create_table(
        'services',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('provider_id', sa.Uuid(as_uuid=True), sa.ForeignKey('providers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('buffer_time_before', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('buffer_time_after', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('requires_staff', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('any_staff_member', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('max_concurrent', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('duration > 0', name='ck_services_duration_positive'),
        sa.CheckConstraint('max_concurrent >= 1', name='ck_services_max_concurrent'),
    )
    op.create_index('ix_services_provider_id', 'services', ['provider_id'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    op.create_table(
        'staff_members',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('provider_id', sa.Uuid(as_uuid=True), sa.ForeignKey('providers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('title', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_staff_members_provider_id', 'staff_members', ['provider_id'])

    op.create_table(
        'staff_service_assignments',
        sa.Column('staff_id', sa.Uuid(as_uuid=True), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('service_id', sa.Uuid(as_uuid=True), sa.ForeignKey('services.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )

    op.create_table(
        'staff_availability',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('staff_id', sa.Uuid(as_uuid=True), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('availability_type', availability_type, nullable=False),
        sa.Column('reason', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('end_time > start_time', name='ck_staff_availability_range'),
    )
    op.create_index('ix_staff_availability_staff_id', 'staff_availability', ['staff_id'])

    # 3. Bookings
    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('provider_id', sa.Uuid(as_uuid=True), sa.ForeignKey('providers.id'), nullable=False),
        sa.Column('service_id', sa.Uuid(as_uuid=True), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('staff_id', sa.Uuid(as_uuid=True), sa.ForeignKey('staff_members.id'), nullable=True),
        sa.Column('customer_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_email', sa.String(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', booking_status, nullable=False),
        sa.Column('payment_method', payment_method, nullable=True),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.CheckConstraint('end_time > start_time', name='ck_bookings_range'),
    )

    # Indexes for the availability queries (overlap by service / staff)
    op.create_index('ix_bookings_provider_id', 'bookings', ['provider_id'])
    op.create_index('ix_bookings_service_id', 'bookings', ['service_id'])
    op.create_index('ix_bookings_staff_id', 'bookings', ['staff_id'])
    op.create_index('ix_bookings_customer_email', 'bookings', ['customer_email'])
    op.create_index('ix_bookings_start_time', 'bookings', ['start_time'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('idx_bookings_service_window', 'bookings', ['service_id', 'start_time', 'end_time'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_bookings_service_window', table_name='bookings')
    op.drop_table('bookings')
    op.drop_table('staff_availability')
    op.drop_table('staff_service_assignments')
    op.drop_table('staff_members')
    op.drop_table('services')
    op.drop_table('business_hours')
    op.drop_table('providers')
    op.drop_table('users')

    payment_method.drop(op.get_bind(), checkfirst=True)
    booking_status.drop(op.get_bind(), checkfirst=True)
    availability_type.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
