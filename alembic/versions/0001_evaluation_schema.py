"""Evaluation system schema

Revision ID: 0001_evaluation_schema
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = '0001_evaluation_schema'
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
        'admins',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(80), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        'evaluators',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(120), nullable=False, unique=True),
        sa.Column('email', sa.String(254)),
        sa.Column('department', sa.String(200), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_table(
        'candidates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('department', sa.String(200), nullable=False),
        sa.Column('position', sa.String(200), nullable=False),
        sa.Column('category', sa.String(120)),
        sa.Column('sub_category', sa.String(120)),
        sa.Column('description', sa.Text()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_candidates_is_active', 'candidates', ['is_active'])
    op.create_table(
        'category_options',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('type', sa.String(10), nullable=False, server_default='main'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('type', 'name', name='uq_category_options_type_name'),
    )
    op.create_table(
        'evaluation_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('category_code', sa.String(40), nullable=False),
        sa.Column('category_name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        'evaluation_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('evaluation_categories.id'), nullable=False),
        sa.Column('item_code', sa.String(40), nullable=False),
        sa.Column('item_name', sa.String(300), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('max_score', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('weight', sa.Numeric(5, 2), nullable=False, server_default='1'),
        sa.Column('is_quantitative', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('has_preset_scores', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_evaluation_items_category_id', 'evaluation_items', ['category_id'])
    op.create_table(
        'evaluation_submissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('evaluator_id', sa.Integer(), sa.ForeignKey('evaluators.id'), nullable=False),
        sa.Column('candidate_id', sa.Integer(), sa.ForeignKey('candidates.id'), nullable=False),
        sa.Column('scores', sa.JSON(), nullable=False),
        sa.Column('total_score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('submitted_at', sa.DateTime()),
        *_timestamps(),
        sa.UniqueConstraint('evaluator_id', 'candidate_id', name='uq_submissions_evaluator_candidate'),
    )
    op.create_index('ix_evaluation_submissions_evaluator_id', 'evaluation_submissions', ['evaluator_id'])
    op.create_index('ix_evaluation_submissions_candidate_id', 'evaluation_submissions', ['candidate_id'])
    op.create_table(
        'candidate_preset_scores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('candidate_id', sa.Integer(), sa.ForeignKey('candidates.id'), nullable=False),
        sa.Column('evaluation_item_id', sa.Integer(), sa.ForeignKey('evaluation_items.id'), nullable=False),
        sa.Column('preset_score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('apply_preset', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notes', sa.Text()),
        *_timestamps(),
        sa.UniqueConstraint('candidate_id', 'evaluation_item_id', name='uq_preset_candidate_item'),
    )
    op.create_index('ix_candidate_preset_scores_candidate_id', 'candidate_preset_scores', ['candidate_id'])
    op.create_table(
        'system_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('evaluation_title', sa.String(200), nullable=False),
        sa.Column('system_name', sa.String(200)),
        sa.Column('description', sa.Text()),
        sa.Column('is_evaluation_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('allow_public_results', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('evaluation_start_date', sa.DateTime()),
        sa.Column('evaluation_end_date', sa.DateTime()),
        sa.Column('max_score', sa.Integer(), server_default='100'),
        *_timestamps(),
    )


def downgrade() -> None:
    for name in ('system_config', 'candidate_preset_scores', 'evaluation_submissions',
                 'evaluation_items', 'evaluation_categories', 'category_options',
                 'candidates', 'evaluators', 'admins'):
        op.drop_table(name)
