"""initial_schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

global_role = sa.Enum('admin', 'user', name='globalrole')
event_role_type = sa.Enum('author', 'reviewer', 'chair', name='eventroletype')
submission_status = sa.Enum(
    'submitted', 'under_review', 'decision_made', 'final_required', 'final_submitted',
    name='submissionstatus'
)
review_status = sa.Enum('assigned', 'submitted', name='reviewstatus')
decision_type = sa.Enum('accept', 'reject', name='decisiontype')

def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]

def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', global_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('description', sa.Text()),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('created_by_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_events_id', 'events', ['id'])

    op.create_table(
        'event_roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', event_role_type, nullable=False),
        sa.Column('granted_by_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('event_id', 'user_id', 'role', name='uq_event_roles_event_user_role'),
    )
    op.create_index('ix_event_roles_id', 'event_roles', ['id'])
    op.create_index('ix_event_roles_event_id', 'event_roles', ['event_id'])
    op.create_index('ix_event_roles_user_id', 'event_roles', ['user_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('author_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('abstract', sa.Text(), nullable=True),
        sa.Column('keywords', sa.String(300), nullable=True),
        sa.Column('authors', sa.JSON(), nullable=False),
        sa.Column('status', submission_status, nullable=False),
        sa.Column('pdf_path', sa.String(500), nullable=True),
        sa.Column('final_pdf_path', sa.String(500), nullable=True),
        sa.Column('final_submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('membership_email', sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_submissions_id', 'submissions', ['id'])
    op.create_index('ix_submissions_event_id', 'submissions', ['event_id'])
    op.create_index('ix_submissions_author_user_id', 'submissions', ['author_user_id'])
    op.create_index('ix_submissions_status', 'submissions', ['status'])

    op.create_table(
        'external_reviewers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('invite_token', sa.String(255), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('invited_by_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_external_reviewers_id', 'external_reviewers', ['id'])
    op.create_index('ix_external_reviewers_event_id', 'external_reviewers', ['event_id'])
    op.create_index('ix_external_reviewers_invite_token', 'external_reviewers', ['invite_token'], unique=True)

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('submission_id', sa.Integer(), sa.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewer_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('external_reviewer_id', sa.Integer(), sa.ForeignKey('external_reviewers.id'), nullable=True),
        sa.Column('assigned_by_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('due_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('submission_id', 'reviewer_user_id', name='uq_assignments_submission_reviewer'),
        sa.UniqueConstraint('submission_id', 'external_reviewer_id', name='uq_assignments_submission_external'),
    )
    op.create_index('ix_assignments_id', 'assignments', ['id'])
    op.create_index('ix_assignments_submission_id', 'assignments', ['submission_id'])
    op.create_index('ix_assignments_reviewer_user_id', 'assignments', ['reviewer_user_id'])
    op.create_index('ix_assignments_external_reviewer_id', 'assignments', ['external_reviewer_id'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('submission_id', sa.Integer(), sa.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewer_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('external_reviewer_id', sa.Integer(), sa.ForeignKey('external_reviewers.id'), nullable=True),
        sa.Column('status', review_status, nullable=False),
        sa.Column('score_technical', sa.Integer(), nullable=True),
        sa.Column('score_relevance', sa.Integer(), nullable=True),
        sa.Column('score_innovation', sa.Integer(), nullable=True),
        sa.Column('score_writing', sa.Integer(), nullable=True),
        sa.Column('score_overall', sa.Float(), nullable=True),
        sa.Column('comments_for_author', sa.Text(), nullable=True),
        sa.Column('comments_committee', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('submission_id', 'reviewer_user_id', name='uq_reviews_submission_reviewer'),
        sa.UniqueConstraint('submission_id', 'external_reviewer_id', name='uq_reviews_submission_external'),
    )
    op.create_index('ix_reviews_id', 'reviews', ['id'])
    op.create_index('ix_reviews_submission_id', 'reviews', ['submission_id'])
    op.create_index('ix_reviews_reviewer_user_id', 'reviews', ['reviewer_user_id'])
    op.create_index('ix_reviews_external_reviewer_id', 'reviews', ['external_reviewer_id'])

    op.create_table(
        'decisions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('submission_id', sa.Integer(), sa.ForeignKey('submissions.id', ondelete='CASCADE'),
                  nullable=False, unique=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('decision', decision_type, nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('decider_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_decisions_id', 'decisions', ['id'])
    op.create_index('ix_decisions_event_id', 'decisions', ['event_id'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trace_id', sa.String(64), nullable=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=True),
        sa.Column('entity_id', sa.String(64), nullable=True),
        sa.Column('severity', sa.String(10), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('ip', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_audit_logs_id', 'audit_logs', ['id'])
    op.create_index('ix_audit_logs_trace_id', 'audit_logs', ['trace_id'])
    op.create_index('ix_audit_logs_actor_user_id', 'audit_logs', ['actor_user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])

def downgrade() -> None:
    for table in (
        'audit_logs', 'decisions', 'reviews', 'assignments', 'external_reviewers',
        'submissions', 'event_roles', 'events', 'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in (decision_type, review_status, submission_status, event_role_type, global_role):
        enum_type.drop(bind, checkfirst=True)
