"""SQLAlchemy table definitions for clubhouse.

These table definitions back the PostgreSQL document store and rate limit
repository. They match the schema defined in Alembic migrations.
"""

from sqlalchemy import BigInteger, Column, Index, MetaData, String, Table
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# DOCUMENTS TABLE (schemaless records addressed by collection path)
# ============================================================================
documents_table = Table(
    "documents",
    metadata,
    Column("collection", String(512), primary_key=True),  # e.g. posts/{id}/comments
    Column("id", String(255), primary_key=True),
    Column("fields", JSONB, nullable=False, server_default="{}"),
    Column("create_time", TIMESTAMP(timezone=False), nullable=False),
    Column("update_time", TIMESTAMP(timezone=False), nullable=False),
)

Index("idx_documents_collection", documents_table.c.collection)

# ============================================================================
# COLLECTION REVISIONS TABLE (bumped on every write, polled by subscribers)
# ============================================================================
collection_revisions_table = Table(
    "collection_revisions",
    metadata,
    Column("collection", String(512), primary_key=True),
    Column("revision", BigInteger, nullable=False, server_default="0"),
)

# ============================================================================
# RATE LIMITS TABLE
# ============================================================================
rate_limits_table = Table(
    "rate_limits",
    metadata,
    Column("user_id", String(255), primary_key=True),
    Column("action", String(50), primary_key=True),  # post, comment, message, score
    Column("last_action_at", TIMESTAMP(timezone=False), nullable=False),
)
