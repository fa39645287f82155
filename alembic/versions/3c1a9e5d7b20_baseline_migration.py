"""baseline_migration

Revision ID: 3c1a9e5d7b20
Revises:
Create Date: 2026-10-18 09:12:41.118203

Creates users, interviews and feedback tables if they don't exist.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '3c1a9e5d7b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('full_name', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('password_hash', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    if not table_exists('interviews'):
        op.create_table('interviews',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('user_id', sa.String(length=32), nullable=False),
            sa.Column('role', sa.String(), nullable=False),
            sa.Column('type', sa.String(), nullable=False),
            sa.Column('level', sa.String(), nullable=False),
            sa.Column('tech_stack', sa.JSON(), nullable=False),
            sa.Column('questions', sa.JSON(), nullable=False),
            sa.Column('finalized', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_interview_user_created', 'interviews', ['user_id', 'created_at'], unique=False)
        op.create_index(op.f('ix_interviews_created_at'), 'interviews', ['created_at'], unique=False)
        op.create_index(op.f('ix_interviews_user_id'), 'interviews', ['user_id'], unique=False)

    if not table_exists('feedback'):
        op.create_table('feedback',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('interview_id', sa.String(length=32), nullable=False),
            sa.Column('user_id', sa.String(length=32), nullable=False),
            sa.Column('total_score', sa.Integer(), nullable=False),
            sa.Column('category_scores', sa.JSON(), nullable=False),
            sa.Column('strengths', sa.JSON(), nullable=False),
            sa.Column('areas_for_improvement', sa.JSON(), nullable=False),
            sa.Column('final_assessment', sa.Text(), nullable=False),
            sa.Column('transcript', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['interview_id'], ['interviews.id'], ),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_feedback_interview_user', 'feedback', ['interview_id', 'user_id'], unique=False)
        op.create_index(op.f('ix_feedback_created_at'), 'feedback', ['created_at'], unique=False)
        op.create_index(op.f('ix_feedback_interview_id'), 'feedback', ['interview_id'], unique=False)
        op.create_index(op.f('ix_feedback_user_id'), 'feedback', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_feedback_user_id'), table_name='feedback')
    op.drop_index(op.f('ix_feedback_interview_id'), table_name='feedback')
    op.drop_index(op.f('ix_feedback_created_at'), table_name='feedback')
    op.drop_index('idx_feedback_interview_user', table_name='feedback')
    op.drop_table('feedback')

    op.drop_index(op.f('ix_interviews_user_id'), table_name='interviews')
    op.drop_index(op.f('ix_interviews_created_at'), table_name='interviews')
    op.drop_index('idx_interview_user_created', table_name='interviews')
    op.drop_table('interviews')

    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
