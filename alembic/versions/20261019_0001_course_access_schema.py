"""course access schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_0001'
down_revision = None
branch_labels = None
depends_on = None


def _course_fk() -> sa.Column:
    return sa.Column(
        'course_id', sa.Integer,
        sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        'courses',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('creator_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('cover_url', sa.String(length=2048), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('join_code', sa.String(length=16), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('enroll_questions', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_courses_creator_id', 'courses', ['creator_id'])
    op.create_index(
        'ix_courses_join_code', 'courses', ['join_code'], unique=True
    )

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        _course_fk(),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('joined_via_code', sa.Boolean(), nullable=False),
        sa.Column('form_answers', sa.JSON(), nullable=False),
        sa.Column('admin_note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            'user_id', 'course_id', name='uq_enrollment_user_course'
        ),
    )
    op.create_index('ix_enrollments_user_id', 'enrollments', ['user_id'])
    op.create_index('ix_enrollments_course_id', 'enrollments', ['course_id'])

    op.create_table(
        'enrollment_transitions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'enrollment_id', sa.Integer,
            sa.ForeignKey('enrollments.id', ondelete='CASCADE'),
            nullable=False
        ),
        sa.Column('from_status', sa.String(length=16), nullable=True),
        sa.Column('to_status', sa.String(length=16), nullable=False),
        sa.Column('reason', sa.String(length=16), nullable=False),
        sa.Column('actor_id', sa.String(length=64), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(
        'ix_enrollment_transitions_enrollment_id',
        'enrollment_transitions', ['enrollment_id']
    )

    op.create_table(
        'course_lessons',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        _course_fk(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('video_url', sa.String(length=2048), nullable=True),
        sa.Column('attachment_url', sa.String(length=2048), nullable=True),
        sa.Column('content_type', sa.String(length=128), nullable=True),
        sa.Column('order_index', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(
        'ix_course_lessons_course_id', 'course_lessons', ['course_id']
    )

    op.create_table(
        'course_sessions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        _course_fk(),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('ends_at', sa.DateTime(), nullable=True),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('mode', sa.String(length=64), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(
        'ix_course_sessions_course_id', 'course_sessions', ['course_id']
    )

    op.create_table(
        'course_materials',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        _course_fk(),
        sa.Column('uploader_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cover_url', sa.String(length=2048), nullable=True),
        sa.Column('attachment_url', sa.String(length=2048), nullable=True),
        sa.Column('content_url', sa.String(length=2048), nullable=True),
        sa.Column('content_type', sa.String(length=128), nullable=True),
        sa.Column('visible_to', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(
        'ix_course_materials_course_id', 'course_materials', ['course_id']
    )

    op.create_table(
        'course_assignments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        _course_fk(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_at', sa.DateTime(), nullable=True),
        sa.Column('resources', sa.JSON(), nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index(
        'ix_course_assignments_course_id', 'course_assignments', ['course_id']
    )

    op.create_table(
        'course_submissions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'assignment_id', sa.Integer,
            sa.ForeignKey('course_assignments.id', ondelete='CASCADE'),
            nullable=False
        ),
        sa.Column('student_id', sa.String(length=64), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('attachment_url', sa.String(length=2048), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('grade', sa.String(length=64), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            'assignment_id', 'student_id',
            name='uq_submission_assignment_student'
        ),
    )
    op.create_index(
        'ix_course_submissions_assignment_id',
        'course_submissions', ['assignment_id']
    )
    op.create_index(
        'ix_course_submissions_student_id',
        'course_submissions', ['student_id']
    )

    op.create_table(
        'course_messages',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        _course_fk(),
        sa.Column('author_id', sa.String(length=64), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('visibility', sa.String(length=16), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(
        'ix_course_messages_course_id', 'course_messages', ['course_id']
    )
    op.create_index('ix_course_messages_kind', 'course_messages', ['kind'])
    op.create_index(
        'ix_course_messages_created_at', 'course_messages', ['created_at']
    )

    op.create_table(
        'course_meeting_links',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        _course_fk(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('url', sa.String(length=2048), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(
        'ix_course_meeting_links_course_id',
        'course_meeting_links', ['course_id']
    )


def downgrade() -> None:
    for table in (
        'course_meeting_links',
        'course_messages',
        'course_submissions',
        'course_assignments',
        'course_materials',
        'course_sessions',
        'course_lessons',
        'enrollment_transitions',
        'enrollments',
        'courses',
    ):
        op.drop_table(table)
