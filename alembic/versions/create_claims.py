"""create claims

Creates the claims table: one row per claim of a mesh block by a caller.

Revision ID: create_claims
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_claims'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'claims',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('mesh_block_slug', sa.String(length=64), nullable=False),
        sa.Column('mesh_block_claimer', sa.String(length=255), nullable=False),
        sa.Column('claim_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_claims_mesh_block_slug', 'claims', ['mesh_block_slug'])
    op.create_index('ix_claims_mesh_block_claimer', 'claims', ['mesh_block_claimer'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_claims_mesh_block_claimer', table_name='claims')
    op.drop_index('ix_claims_mesh_block_slug', table_name='claims')
    op.drop_table('claims')
