"""create users, roles and reports

Revision ID: 3c5e1f2a9b7d
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision: str = '3c5e1f2a9b7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

APP_ROLE = sa.Enum('USER', 'MODERATOR', name='app_role')
REPORT_CATEGORY = sa.Enum('power_outage', 'water_cut', 'road_damage', 'other', name='report_category')
REPORT_STATUS = sa.Enum('pending', 'verified', 'rejected', name='report_status')


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), 'mysql'),
        nullable=nullable,
    )


def _id() -> sa.Column:
    return sa.Column('id', sa.String(length=255), primary_key=True)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_roles',
        _id(),
        sa.Column('user_id', sa.String(length=255), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', APP_ROLE, nullable=False, server_default='USER'),
        _timestamp('created_at'),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),
    )
    op.create_index('ix_user_roles_id', 'user_roles', ['id'])
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    op.create_table(
        'refresh_tokens',
        _id(),
        sa.Column('token', sa.String(length=512), nullable=False),
        sa.Column('user_id', sa.String(length=255), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('ix_refresh_tokens_id', 'refresh_tokens', ['id'])
    op.create_index('ix_refresh_tokens_token', 'refresh_tokens', ['token'], unique=True)
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

    op.create_table(
        'reports',
        _id(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('category', REPORT_CATEGORY, nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.Text(), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('status', REPORT_STATUS, nullable=False, server_default='pending'),
        sa.Column('user_id', sa.String(length=255), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('verified_by', sa.String(length=255), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        _timestamp('verified_at', nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('ix_reports_id', 'reports', ['id'])
    op.create_index('ix_reports_status', 'reports', ['status'])
    op.create_index('ix_reports_user_id', 'reports', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('reports')
    op.drop_table('refresh_tokens')
    op.drop_table('user_roles')
    op.drop_table('users')
    bind = op.get_bind()
    for enum in (REPORT_STATUS, REPORT_CATEGORY, APP_ROLE):
        enum.drop(bind, checkfirst=True)
