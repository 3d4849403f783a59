"""SQLAlchemy adapter – relational outbox schema."""
from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.ext.asyncio import AsyncEngine

metadata = MetaData()

outbox_table = Table(
    "outbox",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("topic", String(255), nullable=False, index=True),
    Column("payload", JSON, nullable=True),
    Column("occurred_at", DateTime(timezone=True), nullable=False, index=True),
    Column("status", String(32), nullable=False, index=True),
    Column("was_quarantined", Boolean, nullable=False, default=False),
    Column("priority", Integer, nullable=True),
    Column("claimed_at", DateTime(timezone=True), nullable=True),
)

outbox_publications_table = Table(
    "outbox_publications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "event_id",
        String(64),
        ForeignKey("outbox.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("published_at", DateTime(timezone=True), nullable=False),
)

outbox_failures_table = Table(
    "outbox_failures",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "publication_id",
        Integer,
        ForeignKey("outbox_publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("subscription_id", String(255), nullable=False),
    Column("error_message", Text, nullable=False),
)


async def create_outbox_tables(bind: AsyncEngine) -> None:
    """Create the outbox tables if they do not exist (use migrations in production)."""
    async with bind.begin() as conn:
        await conn.run_sync(metadata.create_all)


__all__ = [
    "create_outbox_tables",
    "metadata",
    "outbox_failures_table",
    "outbox_publications_table",
    "outbox_table",
]
