"""convert uuid to ulid

Revision ID: f2a7d9e1c4b3
Revises: e5b80c4d7a61
Create Date: 2025-08-30 13:00:00.000000

Replaces the UUID ids of users, projects and donations (and the foreign
keys between them) with ULIDs. Original UUIDs are kept in
identifier_remap_archive, which is what downgrade() restores from.

Needs a live connection: `alembic upgrade --sql` cannot render it.
"""
from typing import Sequence, Union

from alembic import op

from services.identifier_remap import IdentifierRemap


# revision identifiers, used by Alembic.
revision: str = 'f2a7d9e1c4b3'
down_revision: Union[str, Sequence[str], None] = 'e5b80c4d7a61'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    IdentifierRemap().upgrade(op)


def downgrade() -> None:
    IdentifierRemap().downgrade(op)
