"""add timed_out and answer_key to attempts

Revision ID: b2c3d4e5f6g7
Revises: a1b2c3d4e5f6
Create Date: 2026-09-20 18:40:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'b2c3d4e5f6g7'
down_revision: Union[str, None] = 'a1b2c3d4e5f6'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Set when the sweeper auto-fails an attempt nobody submitted
    op.add_column('attempts', sa.Column('timed_out', sa.Boolean(), server_default='false', nullable=False))
    # Frozen [{id, right_answer, points}] for SCORING_BASIS=snapshot
    op.add_column('attempts', sa.Column('answer_key', sa.JSON(), nullable=True))


def downgrade() -> None:
    op.drop_column('attempts', 'answer_key')
    op.drop_column('attempts', 'timed_out')
