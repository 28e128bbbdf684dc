"""initial_schema

Revision ID: 5f1e2a7b9c31
Revises:
Create Date: 2026-10-18 10:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5f1e2a7b9c31'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all application tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('external_id', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('agent_api_key', sa.Text, nullable=False),
        sa.Column('sourcing_agent_id', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_users_external_id', 'users', ['external_id'], unique=True)

    op.create_table(
        'search_sessions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False, server_default=''),
        sa.Column('initial_query', sa.Text, nullable=False),
        sa.Column('attached_jd_id', sa.String(255), nullable=True),
        sa.Column('tool_results', sa.JSON, nullable=True),
        sa.Column('schema_version', sa.Integer, nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_search_sessions_user_id', 'search_sessions', ['user_id'])

    op.create_table(
        'session_turns',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('session_id', sa.String(36), sa.ForeignKey('search_sessions.id'), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('timestamp', sa.DateTime, nullable=False),
    )
    op.create_index('ix_session_turns_session_id', 'session_turns', ['session_id'])

    op.create_table(
        'candidate_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('public_id', sa.String(255), nullable=False),
        sa.Column('raw_data', sa.JSON, nullable=False),
        sa.Column('last_fetched_at', sa.DateTime, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_candidate_profiles_public_id', 'candidate_profiles', ['public_id'], unique=True)


def downgrade() -> None:
    """Drop all application tables."""
    op.drop_index('ix_candidate_profiles_public_id', table_name='candidate_profiles')
    op.drop_table('candidate_profiles')
    op.drop_index('ix_session_turns_session_id', table_name='session_turns')
    op.drop_table('session_turns')
    op.drop_index('ix_search_sessions_user_id', table_name='search_sessions')
    op.drop_table('search_sessions')
    op.drop_index('ix_users_external_id', table_name='users')
    op.drop_table('users')
