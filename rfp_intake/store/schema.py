"""Table definitions for the record store and the analysis queue."""

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

rfps = Table(
    "rfps",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("organization_id", String(64), nullable=False),
    Column("uploaded_by_id", String(64), nullable=True),
    Column("title", String(500), nullable=False),
    Column("client_name", String(255), nullable=False),
    Column("due_date", Date, nullable=True),
    Column("description", Text, nullable=True),
    Column("content_hash", String(64), nullable=False),
    Column("status", String(20), nullable=False, index=True),
    Column("source_metadata", JSON, nullable=False),
    Column("extracted_text", Text, nullable=True),
    Column("extraction_metadata", JSON, nullable=True),
    Column("analysis_result", JSON, nullable=True),
    Column("error_detail", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    Column("deleted_at", DateTime, nullable=True),
)

# One live record per (organization, content); soft-deleted rows free the slot
Index(
    "uq_rfps_org_content_hash_active",
    rfps.c.organization_id,
    rfps.c.content_hash,
    unique=True,
    sqlite_where=rfps.c.deleted_at.is_(None),
    postgresql_where=rfps.c.deleted_at.is_(None),
)

analysis_jobs = Table(
    "analysis_jobs",
    metadata,
    Column("seq", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
    Column("id", String(36), nullable=False, unique=True),
    Column("rfp_id", String(36), nullable=False, index=True),
    Column("priority", Integer, nullable=False, default=0),
    Column("attempt", Integer, nullable=False, default=0),
    Column("max_attempts", Integer, nullable=False, default=3),
    Column("status", String(20), nullable=False, default="queued"),
    Column("visible_after", DateTime, nullable=False),
    Column("enqueued_at", DateTime, nullable=False),
    Column("leased_by", String(128), nullable=True),
    Column("leased_until", DateTime, nullable=True),
    Column("last_error", Text, nullable=True),
)

Index(
    "ix_analysis_jobs_ready",
    analysis_jobs.c.status,
    analysis_jobs.c.priority.desc(),
    analysis_jobs.c.seq,
)
