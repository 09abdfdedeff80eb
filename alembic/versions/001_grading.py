"""grading

Revision ID: 001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'subjects',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('teacher_email', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_subjects_teacher', 'subjects', ['teacher_email'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('subject_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('input_path', sa.String(1024), nullable=False),
        sa.Column('output_path', sa.String(1024), nullable=False),
        sa.Column('question_path', sa.String(1024), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_assignments_subject', 'assignments', ['subject_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('assignment_id', sa.Integer(), nullable=False),
        sa.Column('student_email', sa.String(255), nullable=False),
        sa.Column('source_path', sa.String(1024), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('failure_reason', sa.String(50), nullable=True),
        sa.Column('failure_detail', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('graded_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['assignment_id'], ['assignments.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_submissions_assignment', 'submissions', ['assignment_id'])
    op.create_index('idx_submissions_status', 'submissions', ['status'])


def downgrade() -> None:
    op.drop_index('idx_submissions_status', table_name='submissions')
    op.drop_index('idx_submissions_assignment', table_name='submissions')
    op.drop_table('submissions')
    op.drop_index('idx_assignments_subject', table_name='assignments')
    op.drop_table('assignments')
    op.drop_index('idx_subjects_teacher', table_name='subjects')
    op.drop_table('subjects')
