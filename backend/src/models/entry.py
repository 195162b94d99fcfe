"""Entry model - one persisted record of any registered content type."""
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, DocumentIdMixin, JSONType, TimestampMixin


class Entry(Base, DocumentIdMixin, TimestampMixin):
    """
    Content entry stored generically across content types.

    Scalar attributes, components and dynamic zones live in `data` as JSON, with
    media stored as {"id", "documentId"} refs to rows in `files`. Relations are
    stored separately in `entry_relations`. The uid attribute is lifted into the
    `slug` column so it can be indexed and kept unique per content type.
    """

    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None,
    )

    __table_args__ = (
        # NULL slugs are distinct, so types without a uid attribute are unaffected
        UniqueConstraint("content_type", "slug", name="uq_entries_content_type_slug"),
        Index("ix_entries_content_type", "content_type"),
    )
