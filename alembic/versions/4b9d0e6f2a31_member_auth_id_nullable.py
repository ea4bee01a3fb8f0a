"""member_auth_id_nullable

Revision ID: 4b9d0e6f2a31
Revises: c7e2a91f4d10
Create Date: 2026-10-19 15:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b9d0e6f2a31'
down_revision: Union[str, Sequence[str], None] = 'c7e2a91f4d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Allow members registered by an admin without a login."""
    op.alter_column('members', 'auth_id', existing_type=sa.String(), nullable=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("UPDATE members SET auth_id = 'unlinked-' || CAST(id AS TEXT) WHERE auth_id IS NULL")
    op.alter_column('members', 'auth_id', existing_type=sa.String(), nullable=False)
