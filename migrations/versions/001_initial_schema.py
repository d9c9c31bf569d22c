"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create contests table
    op.create_table('contests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('end_time > start_time', name='check_contest_window'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_contests_creator', 'contests', ['creator_id'], unique=False)

    # Create problems table
    op.create_table('problems',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('contest_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('tags', postgresql.JSONB(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('time_limit', sa.Float(), nullable=False),
        sa.Column('memory_limit', sa.Integer(), nullable=False),
        sa.CheckConstraint('points >= 0', name='check_points'),
        sa.CheckConstraint('time_limit > 0', name='check_time_limit'),
        sa.CheckConstraint('memory_limit > 0', name='check_memory_limit'),
        sa.ForeignKeyConstraint(['contest_id'], ['contests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_problems_contest', 'problems', ['contest_id'], unique=False)

    # Create test_cases table
    op.create_table('test_cases',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('problem_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('input', sa.Text(), nullable=False),
        sa.Column('expected_output', sa.Text(), nullable=False),
        sa.Column('is_hidden', sa.Boolean(), server_default='false', nullable=False),
        sa.ForeignKeyConstraint(['problem_id'], ['problems.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_test_cases_problem', 'test_cases', ['problem_id', 'position'], unique=False)

    # Create submissions table
    op.create_table('submissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('problem_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.Text(), nullable=False),
        sa.Column('language', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('points_earned', sa.Integer(), nullable=False),
        sa.Column('test_cases_passed', sa.Integer(), nullable=False),
        sa.Column('total_test_cases', sa.Integer(), nullable=False),
        sa.Column('execution_time', sa.Integer(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint(
            "status IN ('accepted', 'wrong_answer', 'runtime_error', "
            "'time_limit_exceeded', 'output_limit_exceeded')",
            name='check_submission_status'
        ),
        sa.CheckConstraint(
            'test_cases_passed >= 0 AND test_cases_passed <= total_test_cases',
            name='check_test_cases_passed'
        ),
        sa.CheckConstraint('points_earned >= 0', name='check_points_earned'),
        sa.ForeignKeyConstraint(['problem_id'], ['problems.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'problem_id', name='unique_user_problem')
    )
    op.create_index('idx_submissions_problem', 'submissions', ['problem_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_submissions_problem', table_name='submissions')
    op.drop_table('submissions')
    op.drop_index('idx_test_cases_problem', table_name='test_cases')
    op.drop_table('test_cases')
    op.drop_index('idx_problems_contest', table_name='problems')
    op.drop_table('problems')
    op.drop_index('idx_contests_creator', table_name='contests')
    op.drop_table('contests')
