"""create planner state and pending proposal tables

Revision ID: 0001_create_planner_tables
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_create_planner_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'app_state',
        sa.Column('key', sa.String(length=128), primary_key=True),
        sa.Column('schema_version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    # One row per session: the primary key enforces a single pending proposal
    op.create_table(
        'pending_proposals',
        sa.Column('session_id', sa.String(length=128), primary_key=True),
        sa.Column('preview', sa.Text(), nullable=False),
        sa.Column('action', sa.JSON(), nullable=False),
        sa.Column('confirmation_token', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('pending_proposals')
    op.drop_table('app_state')
