"""initial schema

Revision ID: 3f1c9a2b7d10
Revises: 
Create Date: 2024-06-03 09:12:44.120531

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'reports',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('week_start', sa.String(), nullable=False),
        sa.Column('division', sa.Text(), nullable=True),
        sa.Column('project', sa.Text(), nullable=True),
        sa.Column('prev_progress', sa.Text(), nullable=True),
        sa.Column('curr_progress', sa.Text(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_reports_week_start', 'reports', ['week_start'])

    op.create_table(
        'projects',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('client', sa.Text(), nullable=True),
        sa.Column('pm', sa.Text(), nullable=True),
        sa.Column('period', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('projects')
    op.drop_index('ix_reports_week_start', table_name='reports')
    op.drop_table('reports')
