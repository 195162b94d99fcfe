"""CoreStoreSetting model - small persistent key/value settings."""
from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin


class CoreStoreSetting(Base, TimestampMixin):
    """
    Process-wide key/value setting.

    Values are stored JSON-encoded in a text column so they can be compared
    in SQL (e.g. `value != 'true'`) on any backend.
    """

    __tablename__ = "core_store_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str | None] = mapped_column(
        String(50), nullable=True, comment="Python type name of the decoded value",
    )
    environment: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("key", "environment", name="uq_core_store_key_environment"),
    )
