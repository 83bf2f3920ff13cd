"""Initial job portal schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

from portal_backend.core.custom_types import GUID

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create users, companies, jobs, applications, profiles, messaging and notification tables."""

    op.create_table(
        'users',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('reset_password_token', sa.String(64), nullable=True),
        sa.Column('reset_password_expires', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_reset_password_token', 'users', ['reset_password_token'])

    op.create_table(
        'companies',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('owner_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(500), nullable=False),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('employees_count', sa.String(20), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'jobs',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('employer_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', GUID(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('experience_level', sa.String(20), nullable=False),
        sa.Column('salary_range', sa.String(100), nullable=True),
        sa.Column('min_salary', sa.Integer(), nullable=True),
        sa.Column('max_salary', sa.Integer(), nullable=True),
        sa.Column('skills_required', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('application_deadline', sa.DateTime(), nullable=False),
        sa.Column('posted_at', sa.DateTime(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_jobs_employer_id', 'jobs', ['employer_id'])
    op.create_index('ix_jobs_company_id', 'jobs', ['company_id'])
    op.create_index('ix_jobs_status', 'jobs', ['status'])
    op.create_index('ix_jobs_application_deadline', 'jobs', ['application_deadline'])

    op.create_table(
        'applications',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('job_id', GUID(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('candidate_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employer_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('resume_url', sa.String(500), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('job_id', 'candidate_id', name='uq_applications_job_candidate'),
    )
    op.create_index('ix_applications_job_id', 'applications', ['job_id'])
    op.create_index('ix_applications_candidate_id', 'applications', ['candidate_id'])
    op.create_index('ix_applications_employer_id', 'applications', ['employer_id'])

    op.create_table(
        'candidate_profiles',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('user_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('about', sa.Text(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('default_resume_url', sa.String(500), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'resumes',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('profile_id', GUID(), sa.ForeignKey('candidate_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('url', sa.String(500), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_resumes_profile_id', 'resumes', ['profile_id'])

    op.create_table(
        'saved_jobs',
        sa.Column('profile_id', GUID(), sa.ForeignKey('candidate_profiles.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('job_id', GUID(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('saved_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'messages',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('conversation_id', sa.String(80), nullable=False),
        sa.Column('sender_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('receiver_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_messages_conversation_created', 'messages', ['conversation_id', 'created_at'])
    op.create_index('ix_messages_sender_id', 'messages', ['sender_id'])
    op.create_index('ix_messages_receiver_id', 'messages', ['receiver_id'])

    op.create_table(
        'contents',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('key', sa.String(20), nullable=False, unique=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('last_updated_by', GUID(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'notifications',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('recipient_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(40), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.String(20), nullable=True),
        sa.Column('entity_id', GUID(), nullable=True),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('delivery_channels', sa.JSON(), nullable=False),
        sa.Column('delivery_results', sa.JSON(), nullable=False),
        sa.Column('is_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_notifications_recipient_created', 'notifications', ['recipient_id', 'created_at'])
    op.create_index('ix_notifications_recipient_read', 'notifications', ['recipient_id', 'is_read'])
    op.create_index('ix_notifications_expires_at', 'notifications', ['expires_at'])

    op.create_table(
        'device_tokens',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('user_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('fcm_token', sa.String(512), nullable=False, unique=True),
        sa.Column('platform', sa.String(20), nullable=False),
        sa.Column('device_id', sa.String(255), nullable=True),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_used', sa.DateTime(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_device_tokens_user_id', 'device_tokens', ['user_id'])


def downgrade() -> None:
    """Drop every portal table."""
    for table in (
        'device_tokens',
        'notifications',
        'contents',
        'messages',
        'saved_jobs',
        'resumes',
        'candidate_profiles',
        'applications',
        'jobs',
        'companies',
        'users',
    ):
        op.drop_table(table)
