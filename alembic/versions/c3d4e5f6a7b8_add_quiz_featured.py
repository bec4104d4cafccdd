"""add featured flag to quizzes

Revision ID: c3d4e5f6a7b8
Revises: b2c3d4e5f6g7
Create Date: 2026-10-18 11:05:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c3d4e5f6a7b8'
down_revision: Union[str, None] = 'b2c3d4e5f6g7'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('quizzes', sa.Column('featured', sa.Boolean(), server_default='false', nullable=False))
    op.create_index('ix_quizzes_featured', 'quizzes', ['featured'])


def downgrade() -> None:
    op.drop_index('ix_quizzes_featured', table_name='quizzes')
    op.drop_column('quizzes', 'featured')
