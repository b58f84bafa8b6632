"""initial_document_store

Create the schema backing the comment sync engine:
- Documents (schemaless JSONB records keyed by collection path and id)
- Collection revisions (bumped on every write, polled by subscriptions)
- Rate limits (last accepted action per user and action kind)

Revision ID: 3c41d7a9e2b0
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c41d7a9e2b0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "documents",
        sa.Column("collection", sa.String(length=512), nullable=False),
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column(
            "fields",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="{}",
            nullable=False,
        ),
        sa.Column("create_time", postgresql.TIMESTAMP(timezone=False), nullable=False),
        sa.Column("update_time", postgresql.TIMESTAMP(timezone=False), nullable=False),
        sa.PrimaryKeyConstraint("collection", "id"),
    )
    op.create_index("idx_documents_collection", "documents", ["collection"])

    op.create_table(
        "collection_revisions",
        sa.Column("collection", sa.String(length=512), nullable=False),
        sa.Column("revision", sa.BigInteger(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("collection"),
    )

    op.create_table(
        "rate_limits",
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column(
            "last_action_at", postgresql.TIMESTAMP(timezone=False), nullable=False
        ),
        sa.PrimaryKeyConstraint("user_id", "action"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("rate_limits")
    op.drop_table("collection_revisions")
    op.drop_index("idx_documents_collection", table_name="documents")
    op.drop_table("documents")
