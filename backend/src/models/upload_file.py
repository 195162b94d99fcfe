"""UploadFile model for uploaded media assets."""
from decimal import Decimal

from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, DocumentIdMixin, TimestampMixin


class UploadFile(Base, DocumentIdMixin, TimestampMixin):
    """
    Uploaded asset metadata. The bytes live with the upload provider.

    `name` is the logical base name (no extension) used to detect assets that
    were already uploaded.
    """

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    alternative_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    hash: Mapped[str] = mapped_column(String(255), nullable=False)
    ext: Mapped[str | None] = mapped_column(String(20), nullable=True)
    mime: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    size: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, comment="Size in kilobytes",
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False, default="local")

    def as_ref(self) -> dict[str, int | str]:
        """Reference stored in entry data for media attributes."""
        return {"id": self.id, "documentId": self.document_id}
