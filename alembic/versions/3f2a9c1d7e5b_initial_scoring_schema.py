"""initial scoring schema

Revision ID: 3f2a9c1d7e5b
Revises: 
Create Date: 2026-10-19 09:12:41.120553

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e5b'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(), nullable=False, unique=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('roles', sa.String(), nullable=False, server_default='student'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('instructor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('weight_w1', sa.Float(), nullable=False, server_default='0.5'),
        sa.Column('weight_w2', sa.Float(), nullable=False, server_default='0.3'),
        sa.Column('weight_w3', sa.Float(), nullable=False, server_default='0.2'),
        sa.Column('weight_w4', sa.Float(), nullable=False, server_default='0.1'),
        sa.Column('freerider_threshold', sa.Float(), nullable=False, server_default='0.3'),
        sa.Column('pressure_threshold', sa.Integer(), nullable=False, server_default='15'),
        sa.Column('is_finalized', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_projects_id', 'projects', ['id'])

    op.create_table(
        'groups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('leader_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
    )
    op.create_index('ix_groups_id', 'groups', ['id'])
    op.create_index('ix_groups_project_id', 'groups', ['project_id'])

    op.create_table(
        'group_members',
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id'), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id'), nullable=False),
        sa.Column('assignee_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('difficulty', sa.Integer(), nullable=True),
        sa.Column('deadline', sa.Date(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='not_started'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_tasks_id', 'tasks', ['id'])
    op.create_index('ix_tasks_group_id', 'tasks', ['group_id'])
    op.create_index('ix_tasks_assignee_id', 'tasks', ['assignee_id'])

    op.create_table(
        'commit_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('commit_id', sa.String(), nullable=False),
        sa.Column('message', sa.String(), nullable=False, server_default=''),
        sa.Column('author_name', sa.String(), nullable=False),
        sa.Column('author_email', sa.String(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id'), nullable=False),
        sa.Column('task_id', sa.Integer(), sa.ForeignKey('tasks.id'), nullable=True),
        sa.Column('valid', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('additions', sa.Integer(), nullable=True),
        sa.Column('deletions', sa.Integer(), nullable=True),
    )
    op.create_index('ix_commit_records_id', 'commit_records', ['id'])
    op.create_index('ix_commit_records_task_id', 'commit_records', ['task_id'])

    op.create_table(
        'peer_reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('reviewer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('reviewee_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_valid', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_peer_reviews_id', 'peer_reviews', ['id'])
    op.create_index('ix_peer_reviews_project_id', 'peer_reviews', ['project_id'])
    op.create_index('ix_peer_reviews_reviewee_id', 'peer_reviews', ['reviewee_id'])

    op.create_table(
        'contribution_scores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('task_completion_score', sa.Float(), nullable=True),
        sa.Column('peer_review_score', sa.Float(), nullable=True),
        sa.Column('code_contribution_score', sa.Float(), nullable=True),
        sa.Column('total_additions', sa.Integer(), nullable=True),
        sa.Column('total_deletions', sa.Integer(), nullable=True),
        sa.Column('late_task_count', sa.Integer(), nullable=True),
        sa.Column('calculated_score', sa.Float(), nullable=False),
        sa.Column('adjusted_score', sa.Float(), nullable=True),
        sa.Column('adjustment_reason', sa.String(length=500), nullable=True),
        sa.Column('is_final', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('user_id', 'project_id', name='uq_contribution_user_project'),
    )
    op.create_index('ix_contribution_scores_id', 'contribution_scores', ['id'])
    op.create_index('ix_contribution_scores_project_id', 'contribution_scores', ['project_id'])

    op.create_table(
        'pressure_score_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_pressure_score_history_id', 'pressure_score_history', ['id'])
    op.create_index(
        'ix_pressure_history_user_project_recorded',
        'pressure_score_history',
        ['user_id', 'project_id', 'recorded_at'],
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.String(length=1000), nullable=False),
        sa.Column('notification_type', sa.String(), nullable=False, server_default='PRESSURE_ALERT'),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('pressure_score_history')
    op.drop_table('contribution_scores')
    op.drop_table('peer_reviews')
    op.drop_table('commit_records')
    op.drop_table('tasks')
    op.drop_table('group_members')
    op.drop_table('groups')
    op.drop_table('projects')
    op.drop_table('users')
