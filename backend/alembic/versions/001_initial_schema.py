"""Initial schema with all tables

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()'))


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
    ]


def _fk(column: str, target: str, nullable: bool = True, ondelete: Union[str, None] = None) -> sa.Column:
    return sa.Column(
        column,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    # Enable extensions
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # Lookup tables
    for table in ('roles', 'task_statuses', 'task_approval_statuses'):
        op.create_table(
            table,
            _id(),
            sa.Column('name', sa.String(100), nullable=False),
            *_timestamps(),
            sa.UniqueConstraint('name', name=f'uq_{table}_name'),
        )

    # Organisation
    op.create_table(
        'companies',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_headquarter', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'departments',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        _fk('company_id', 'companies.id', nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('name', name='uq_departments_name'),
    )

    op.create_table(
        'teams',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        _fk('department_id', 'departments.id', nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('name', name='uq_teams_name'),
    )
    op.create_index('ix_teams_department_id', 'teams', ['department_id'])

    # Users table
    op.create_table(
        'users',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('avatar', sa.String(1024), nullable=True),
        sa.Column('bootstrap_admin', sa.Boolean(), nullable=True),
        _fk('role_id', 'roles.id', nullable=False),
        _fk('company_id', 'companies.id', ondelete='SET NULL'),
        _fk('department_id', 'departments.id', ondelete='SET NULL'),
        _fk('team_id', 'teams.id', ondelete='SET NULL'),
        *_timestamps(),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sa.UniqueConstraint('bootstrap_admin', name='uq_users_bootstrap_admin'),
    )

    # Projects and their stages
    op.create_table(
        'projects',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        _fk('created_by', 'users.id', nullable=False),
        _fk('company_id', 'companies.id', ondelete='SET NULL'),
        _fk('department_id', 'departments.id', ondelete='SET NULL'),
        _fk('team_id', 'teams.id', ondelete='SET NULL'),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('name', name='uq_projects_name'),
    )

    op.create_table(
        'task_stages',
        _id(),
        _fk('project_id', 'projects.id', nullable=False, ondelete='CASCADE'),
        sa.Column('title', sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_task_stages_project_id', 'task_stages', ['project_id'])

    # Tasks table
    op.create_table(
        'tasks',
        _id(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        _fk('created_by', 'users.id', nullable=False),
        _fk('assigned_to', 'users.id', ondelete='SET NULL'),
        _fk('status_id', 'task_statuses.id', ondelete='SET NULL'),
        _fk('approval_status_id', 'task_approval_statuses.id', ondelete='SET NULL'),
        _fk('task_stage_id', 'task_stages.id', ondelete='SET NULL'),
        sa.Column('deadline', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_tasks_status_stage', 'tasks', ['status_id', 'task_stage_id'])

    # Per-task grants
    op.create_table(
        'task_permissions',
        _id(),
        _fk('task_id', 'tasks.id', nullable=False, ondelete='CASCADE'),
        _fk('user_id', 'users.id', nullable=False, ondelete='CASCADE'),
        sa.Column('permission_type', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.UniqueConstraint('task_id', 'user_id', name='uq_task_permissions_task_user'),
        sa.CheckConstraint('permission_type IN (0, 1, 2)', name='ck_task_permissions_permission_type_valid'),
    )
    op.create_index('ix_task_permissions_user_id', 'task_permissions', ['user_id'])

    # Task conversation
    op.create_table(
        'task_messages',
        _id(),
        _fk('task_id', 'tasks.id', nullable=False, ondelete='CASCADE'),
        _fk('sender_id', 'users.id', nullable=False, ondelete='CASCADE'),
        _fk('receiver_id', 'users.id', nullable=False, ondelete='CASCADE'),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_task_messages_task_id', 'task_messages', ['task_id'])


def downgrade() -> None:
    op.drop_table('task_messages')
    op.drop_table('task_permissions')
    op.drop_table('tasks')
    op.drop_table('task_stages')
    op.drop_table('projects')
    op.drop_table('users')
    op.drop_table('teams')
    op.drop_table('departments')
    op.drop_table('companies')
    op.drop_table('task_approval_statuses')
    op.drop_table('task_statuses')
    op.drop_table('roles')
