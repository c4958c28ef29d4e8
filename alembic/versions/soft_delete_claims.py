"""soft delete claims

Adds deleted_at so released claims stay in the table for reporting, and a
partial unique index so each mesh block has at most one active claim.

Revision ID: soft_delete_claims
Revises: create_claims
Create Date: 2026-10-19 10:30:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'soft_delete_claims'
down_revision: Union[str, Sequence[str], None] = 'create_claims'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('claims', sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True))
    op.create_index(
        'uq_claims_active_slug',
        'claims',
        ['mesh_block_slug'],
        unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'),
        sqlite_where=sa.text('deleted_at IS NULL'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_claims_active_slug', table_name='claims')
    op.drop_column('claims', 'deleted_at')
