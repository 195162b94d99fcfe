"""Service layer for uploaded media assets (local provider)."""
import logging
import re
import secrets
import shutil
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.upload_file import UploadFile

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]+")


@dataclass(frozen=True)
class FileData:
    """A local file staged for upload."""

    filepath: Path
    original_file_name: str
    size: int  # bytes
    mimetype: str


@dataclass(frozen=True)
class FileInfo:
    """Metadata recorded with an uploaded file."""

    name: str
    alternative_text: str | None = None
    caption: str | None = None


def _size_in_kb(size_bytes: int) -> Decimal:
    return (Decimal(size_bytes) / Decimal(1000)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _ext_of(file_name: str) -> str | None:
    suffix = Path(file_name).suffix
    return suffix.lower() if suffix else None


class UploadService:
    """
    Store uploaded bytes under `upload_dir` and record them in `files`.

    Stored files are named `<safe name>_<random hex><ext>` so two uploads of the
    same logical name never overwrite each other on disk.
    """

    def __init__(self, upload_dir: Path, url_prefix: str = "/uploads") -> None:
        self.upload_dir = upload_dir
        self.url_prefix = url_prefix.rstrip("/")

    async def upload(
        self,
        db: AsyncSession,
        file_data: FileData,
        file_info: FileInfo,
    ) -> list[UploadFile]:
        """
        Upload one local file and return the created file records.

        Raises:
            FileNotFoundError: If the staged file does not exist.
        """
        ext = _ext_of(file_data.original_file_name)
        safe_name = _UNSAFE_CHARS.sub("_", file_info.name).strip("_") or "file"
        file_hash = f"{safe_name}_{secrets.token_hex(5)}"
        stored_name = f"{file_hash}{ext or ''}"

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(file_data.filepath, self.upload_dir / stored_name)

        file = UploadFile(
            name=file_info.name,
            alternative_text=file_info.alternative_text,
            caption=file_info.caption,
            hash=file_hash,
            ext=ext,
            mime=file_data.mimetype,
            size=_size_in_kb(file_data.size),
            url=f"{self.url_prefix}/{stored_name}",
            provider="local",
        )
        db.add(file)
        await db.flush()
        await db.refresh(file)
        logger.info("Uploaded %s as %s", file_data.original_file_name, file.url)
        return [file]

    async def find_by_name(self, db: AsyncSession, name: str) -> UploadFile | None:
        """Return the first file recorded under this logical name, if any."""
        stmt = select(UploadFile).where(UploadFile.name == name).order_by(UploadFile.id).limit(1)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()
