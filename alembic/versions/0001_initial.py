"""initial schema: users, workspaces, api_tokens, billing_quotas, services, bills, sessions
Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=256), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table('workspaces',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('owner_id', 'title', name='uq_workspaces_owner_id_title'),
    )
    op.create_index('ix_workspaces_owner_id', 'workspaces', ['owner_id'], unique=False)

    # api_tokens: sin updated_at (no se editan)
    op.create_table('api_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('token', sa.String(length=40), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('workspace_id', sa.Integer(), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('workspace_id', 'name', name='uq_api_tokens_workspace_id_name'),
    )
    op.create_index('ix_api_tokens_workspace_id', 'api_tokens', ['workspace_id'], unique=False)

    op.create_table('billing_quotas',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('limit', sa.Float(), nullable=False),
        sa.Column('workspace_id', sa.Integer(), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('workspace_id', name='uq_billing_quotas_workspace_id'),
    )

    op.create_table('services',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('cost_per_ms', sa.Float(), nullable=False),
        sa.Column('api_token_id', sa.Integer(), sa.ForeignKey('api_tokens.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('api_token_id', 'name', name='uq_services_api_token_id_name'),
    )
    op.create_index('ix_services_api_token_id', 'services', ['api_token_id'], unique=False)

    # bills: append-only
    op.create_table('bills',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('usage_started_at', sa.DateTime(), nullable=False),
        sa.Column('usage_duration_in_ms', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), sa.ForeignKey('services.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_bills_service_id', 'bills', ['service_id'], unique=False)

    op.create_table('sessions',
        sa.Column('sid', sa.String(length=64), primary_key=True),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_sessions_expires_at', 'sessions', ['expires_at'], unique=False)


def downgrade():
    op.drop_table('sessions')
    op.drop_table('bills')
    op.drop_table('services')
    op.drop_table('billing_quotas')
    op.drop_table('api_tokens')
    op.drop_table('workspaces')
    op.drop_table('users')
