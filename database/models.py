"""
SQLAlchemy ORM model for the queue table — Cross-database compatible.

Supports: PostgreSQL, MySQL 8+, SQLite.

Key design decisions:
  - Uuid type for the primary key: native uuid on PostgreSQL, CHAR(32) hex
    elsewhere. Both compare in byte order, which the ordered-time layout
    of the id relies on.
  - Deadlines are plain BigInteger epoch seconds, not DateTime, so the
    consumer's comparisons are portable.
  - Headers and properties are Text holding JSON, written by the producer.
"""
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import (
    BigInteger, Boolean, Index, SmallInteger, String, Text, Uuid,
)
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all ORM models."""
    pass


class QueueMessageRow(Base):
    __tablename__ = "enqueue"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    human_id: Mapped[str] = mapped_column(String(36), nullable=False)
    published_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    headers: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    properties: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[Optional[int]] = mapped_column(SmallInteger, nullable=True)
    queue: Mapped[str] = mapped_column(String(255), nullable=False)

    # Owned by the consumer; the producer never writes these.
    redelivered: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    delivery_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    redeliver_after: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    delayed_until: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    time_to_live: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        Index("ix_enqueue_poll", "priority", "published_at", "queue",
              "delivery_id", "delayed_until", "id"),
        Index("ix_enqueue_redelivery", "redelivered", "delivery_id"),
        Index("ix_enqueue_expiry", "time_to_live", "delivery_id"),
        Index("ix_enqueue_delivery", "delivery_id"),
    )
