"""create_timekeeper_schema

Revision ID: 3f2b7c9d1e04
Revises:
Create Date: 2026-10-19 09:12:44.218310

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2b7c9d1e04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _tenant_fk():
    return sa.Column(
        'tenant_id',
        sa.Integer(),
        sa.ForeignKey('tenants.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )


def _hours(name):
    return sa.Column(
        name, sa.Numeric(precision=5, scale=2), nullable=False, server_default='0'
    )


def upgrade() -> None:
    """
    Create the multi-tenant timesheet schema.

    Every tenant-owned table carries tenant_id -> tenants.id (CASCADE).
    """
    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=True),
        sa.Column('subdomain', sa.String(length=100), nullable=True),
        sa.Column('plan', sa.String(length=50), nullable=False, server_default='free'),
        sa.Column('max_users', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('trial_ends_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_tenants_slug', 'tenants', ['slug'], unique=True)
    op.create_index('ix_tenants_domain', 'tenants', ['domain'], unique=True)
    op.create_index('ix_tenants_subdomain', 'tenants', ['subdomain'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=7), nullable=False, server_default='user', index=True),
        sa.Column('timezone', sa.String(length=50), nullable=False, server_default='UTC'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'invited_by',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('invited_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'username', name='uq_users_tenant_username'),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_users_tenant_email'),
    )

    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'manager_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
            index=True,
        ),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('client_name', sa.String(length=255), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=False, server_default='#1976D2'),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='active', index=True),
        sa.Column('priority', sa.String(length=6), nullable=False, server_default='medium'),
        sa.Column('budget', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('hourly_rate', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column(
            'department_id',
            sa.Integer(),
            sa.ForeignKey('departments.id', ondelete='SET NULL'),
            nullable=True,
            index=True,
        ),
        sa.Column(
            'manager_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
            index=True,
        ),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('is_billable', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('requires_approval', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'project_assignments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column(
            'project_id',
            sa.Integer(),
            sa.ForeignKey('projects.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('role', sa.String(length=6), nullable=False, server_default='member'),
        sa.Column(
            'assigned_by',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint('project_id', 'user_id', name='uq_project_user'),
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column(
            'project_id',
            sa.Integer(),
            sa.ForeignKey('projects.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'assigned_to',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
            index=True,
        ),
        sa.Column('status', sa.String(length=11), nullable=False, server_default='open', index=True),
        sa.Column('priority', sa.String(length=6), nullable=False, server_default='medium'),
        sa.Column('estimated_hours', sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('is_billable', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'timesheets',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('week_start_date', sa.Date(), nullable=False, index=True),
        sa.Column('week_end_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='draft', index=True),
        _hours('total_hours'),
        _hours('billable_hours'),
        _hours('overtime_hours'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'approved_by',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'week_start_date', name='uq_timesheet_user_week'),
    )
    op.create_index('ix_timesheets_tenant_status', 'timesheets', ['tenant_id', 'status'])

    op.create_table(
        'timesheet_entries',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column(
            'timesheet_id',
            sa.Integer(),
            sa.ForeignKey('timesheets.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column(
            'project_id',
            sa.Integer(),
            sa.ForeignKey('projects.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column(
            'task_id',
            sa.Integer(),
            sa.ForeignKey('tasks.id', ondelete='SET NULL'),
            nullable=True,
            index=True,
        ),
        sa.Column('description', sa.String(length=1000), nullable=True),
        _hours('monday_hours'),
        _hours('tuesday_hours'),
        _hours('wednesday_hours'),
        _hours('thursday_hours'),
        _hours('friday_hours'),
        _hours('saturday_hours'),
        _hours('sunday_hours'),
        sa.Column('is_billable', sa.Boolean(), nullable=False, server_default=sa.true()),
        _hours('total_hours'),
        *_timestamps(),
    )

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('resource_type', sa.String(length=50), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_audit_logs_tenant_created', 'audit_logs', ['tenant_id', 'created_at'])

    op.create_table(
        'revoked_tokens',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('jti', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_revoked_tokens_jti', 'revoked_tokens', ['jti'], unique=True)


def downgrade() -> None:
    """Drop the timekeeper schema."""
    op.drop_index('ix_revoked_tokens_jti', table_name='revoked_tokens')
    op.drop_table('revoked_tokens')
    op.drop_index('ix_audit_logs_tenant_created', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_table('timesheet_entries')
    op.drop_index('ix_timesheets_tenant_status', table_name='timesheets')
    op.drop_table('timesheets')
    op.drop_table('tasks')
    op.drop_table('project_assignments')
    op.drop_table('projects')
    op.drop_table('departments')
    op.drop_table('users')
    op.drop_index('ix_tenants_subdomain', table_name='tenants')
    op.drop_index('ix_tenants_domain', table_name='tenants')
    op.drop_index('ix_tenants_slug', table_name='tenants')
    op.drop_table('tenants')
