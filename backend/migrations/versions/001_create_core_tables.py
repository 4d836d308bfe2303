"""Create users, projects, project_identities, api_keys, email_logs and email_log_events

Revision ID: 001
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # Tables may already exist when created by Base.metadata.create_all
    conn = op.get_bind()
    existing_tables = inspect(conn).get_table_names()

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password', sa.String(length=255), nullable=False),
            sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('auth_provider', sa.String(length=6), nullable=False),
            sa.Column('verification_code', sa.String(length=255), nullable=True),
            sa.Column('verification_code_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('reset_password_code', sa.String(length=255), nullable=True),
            sa.Column('reset_password_code_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('verification_code'),
            sa.UniqueConstraint('reset_password_code'),
        )
        op.create_index('ix_users_email', 'users', ['email'])

    if 'projects' not in existing_tables:
        op.create_table(
            'projects',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('access_key_id', sa.String(length=255), nullable=True),
            sa.Column('secret_access_key', sa.String(length=255), nullable=True),
            sa.Column('region', sa.String(length=50), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id'),
        )

    if 'project_identities' not in existing_tables:
        op.create_table(
            'project_identities',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('project_id', sa.String(length=32), nullable=False),
            sa.Column('domain', sa.String(length=255), nullable=False),
            sa.Column('status', sa.String(length=17), nullable=False),
            sa.Column('configuration_set_name', sa.String(length=255), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('project_id', 'domain', name='uq_project_identities_project_domain'),
        )
        op.create_index('ix_project_identities_project_id', 'project_identities', ['project_id'])
        op.create_index('ix_project_identities_domain', 'project_identities', ['domain'])

    if 'api_keys' not in existing_tables:
        op.create_table(
            'api_keys',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('project_id', sa.String(length=32), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('key', sa.String(length=255), nullable=False),
            sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_api_keys_project_id', 'api_keys', ['project_id'])
        op.create_index('ix_api_keys_key', 'api_keys', ['key'], unique=True)

    if 'email_logs' not in existing_tables:
        op.create_table(
            'email_logs',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('message_id', sa.String(length=255), nullable=True),
            sa.Column('project_id', sa.String(length=32), nullable=False),
            sa.Column('api_key_id', sa.String(length=32), nullable=True),
            sa.Column('from_email', sa.String(length=255), nullable=False),
            sa.Column('to_email', sa.String(length=255), nullable=False),
            sa.Column('reply_to', sa.String(length=255), nullable=True),
            sa.Column('subject', sa.String(length=998), nullable=False),
            sa.Column('text', sa.Text(), nullable=True),
            sa.Column('html', sa.Text(), nullable=True),
            sa.Column('status', sa.String(length=10), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['api_key_id'], ['api_keys.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_email_logs_message_id', 'email_logs', ['message_id'])
        op.create_index('ix_email_logs_project_id', 'email_logs', ['project_id'])
        op.create_index('ix_email_logs_api_key_id', 'email_logs', ['api_key_id'])
        op.create_index('ix_email_logs_to_email', 'email_logs', ['to_email'])
        op.create_index('ix_email_logs_status', 'email_logs', ['status'])

    if 'email_log_events' not in existing_tables:
        op.create_table(
            'email_log_events',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('email_log_id', sa.String(length=32), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('type', sa.String(length=10), nullable=False),
            sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['email_log_id'], ['email_logs.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_email_log_events_email_log_id', 'email_log_events', ['email_log_id'])
        op.create_index('ix_email_log_events_type', 'email_log_events', ['type'])


def downgrade() -> None:
    conn = op.get_bind()
    existing_tables = inspect(conn).get_table_names()

    for table in ('email_log_events', 'email_logs', 'api_keys', 'project_identities', 'projects', 'users'):
        if table in existing_tables:
            op.drop_table(table)
