"""EntryRelation model for relation attributes between entries."""
from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin


class EntryRelation(Base, TimestampMixin):
    """
    Directed edge for a relation attribute: parent.<attribute> -> child.

    Edges are ordered per (parent, attribute) by `position`. The unique
    constraint makes a repeated connect of the same pair a no-op at the
    storage level as well as in the service layer.
    """

    __tablename__ = "entry_relations"

    id: Mapped[int] = mapped_column(primary_key=True)
    parent_id: Mapped[int] = mapped_column(
        ForeignKey("entries.id", ondelete="CASCADE"),
        nullable=False,
    )
    attribute: Mapped[str] = mapped_column(String(100), nullable=False)
    child_id: Mapped[int] = mapped_column(
        ForeignKey("entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("parent_id", "attribute", "child_id", name="uq_entry_relation"),
        Index("ix_entry_relations_parent", "parent_id", "attribute"),
    )
