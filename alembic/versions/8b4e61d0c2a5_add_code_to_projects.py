"""add code to projects

Revision ID: 8b4e61d0c2a5
Revises: 3f1c9a2b7d10
Create Date: 2024-07-15 16:40:02.318845

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b4e61d0c2a5'
down_revision: Union[str, None] = '3f1c9a2b7d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.add_column('projects', sa.Column('code', sa.Text(), nullable=True))

def downgrade():
    op.drop_column('projects', 'code')
