"""add provider blocked times and password resets

Revision ID: 9c2e5b7a1d34
Revises: 4a1f2c9d7e10
Create Date: 2026-10-20 10:41:07.512833

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '9c2e5b7a1d34'
down_revision: Union[str, Sequence[str], None] = '4a1f2c9d7e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'blocked_times',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('provider_id', sa.Uuid(as_uuid=True), sa.ForeignKey('providers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reason', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('end_time > start_time', name='ck_blocked_times_range'),
    )
    op.create_index('ix_blocked_times_provider_id', 'blocked_times', ['provider_id'])
    op.create_index('idx_blocked_times_provider_window', 'blocked_times', ['provider_id', 'start_time', 'end_time'])

    op.create_table(
        'password_resets',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_password_resets_token', 'password_resets', ['token'], unique=True)
    op.create_index('ix_password_resets_user_id', 'password_resets', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_password_resets_user_id', table_name='password_resets')
    op.drop_index('ix_password_resets_token', table_name='password_resets')
    op.drop_table('password_resets')

    op.drop_index('idx_blocked_times_provider_window', table_name='blocked_times')
    op.drop_index('ix_blocked_times_provider_id', table_name='blocked_times')
    op.drop_table('blocked_times')
