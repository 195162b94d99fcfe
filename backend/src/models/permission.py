"""Role and Permission models for public API access."""
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin


class Role(Base, TimestampMixin):
    """API role. The 'public' role applies to unauthenticated requests."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    permissions: Mapped[list["Permission"]] = relationship(
        back_populates="role",
        cascade="all, delete-orphan",
    )


class Permission(Base, TimestampMixin):
    """Grants a role one controller action, e.g. 'api::article.article.find'."""

    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(primary_key=True)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role: Mapped[Role] = relationship(back_populates="permissions")

    __table_args__ = (
        UniqueConstraint("action", "role_id", name="uq_permissions_action_role"),
    )
