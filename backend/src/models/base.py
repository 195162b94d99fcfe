"""SQLAlchemy declarative base with common mixins."""
import secrets
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


def generate_document_id() -> str:
    """Return a new 24-character lowercase document id."""
    return secrets.token_hex(12)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at columns.

    All timestamps are timezone-aware (stored as TIMESTAMP WITH TIME ZONE in PostgreSQL).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class DocumentIdMixin:
    """
    Mixin that adds a stable public document id alongside the integer row id.

    The row id is internal; APIs and relation references prefer the document id.
    """

    document_id: Mapped[str] = mapped_column(
        String(24),
        default=generate_document_id,
        nullable=False,
        index=True,
    )
