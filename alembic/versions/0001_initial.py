"""Initial schema: employees, admins, departments, scenarios, assessments

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('job_title', sa.String(120)),
        sa.Column('department', sa.String(120)),
        sa.Column('ranking', sa.Integer()),
        sa.Column('win_rate', sa.Float()),
        sa.Column('streak', sa.Integer()),
        *_timestamps(),
    )
    op.create_table(
        'admins',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('username', sa.String(80), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(120)),
        *_timestamps(),
    )
    op.create_table(
        'departments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(120), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        'scenarios',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('scenario_text', sa.Text(), nullable=False),
        sa.Column('task', sa.Text()),
        sa.Column('difficulty', sa.String(40)),
        sa.Column('rubric', sa.JSON(), nullable=False),
        sa.Column('hint', sa.Text()),
        sa.Column('creator_id', sa.String(64)),
        sa.Column('source_file', sa.String(512)),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('type', sa.String(20)),
        sa.Column('category', sa.String(120)),
        sa.Column('skill', sa.String(120)),
        sa.Column('department_id', sa.String(36), sa.ForeignKey('departments.id')),
        sa.Column('post_assessment_date', sa.String(40)),
        sa.Column('post_assessment_data', sa.JSON()),
        *_timestamps(),
    )
    op.create_table(
        'assessments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('scenario_id', sa.String(36), sa.ForeignKey('scenarios.id'), nullable=False),
        sa.Column('score', sa.Float()),
        sa.Column('feedback', sa.Text()),
        sa.Column('user_response', sa.Text()),
        sa.Column('difficulty', sa.String(40)),
        *_timestamps(),
    )
    op.create_index('ix_assessments_user_id', 'assessments', ['user_id'])
    op.create_index('ix_assessments_scenario_id', 'assessments', ['scenario_id'])


def downgrade() -> None:
    op.drop_index('ix_assessments_scenario_id', table_name='assessments')
    op.drop_index('ix_assessments_user_id', table_name='assessments')
    for t in ('assessments', 'scenarios', 'departments', 'admins', 'employees'):
        op.drop_table(t)
