"""Resolve seed file names to uploaded assets, uploading only what is missing."""
import logging
import mimetypes
from collections.abc import Sequence
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from models.upload_file import UploadFile
from services.upload_service import FileData, FileInfo, UploadService

logger = logging.getLogger(__name__)


def base_name(file_name: str) -> str:
    """Logical asset name: everything before the first dot ("a.b.png" -> "a")."""
    return file_name.split(".", 1)[0]


def mime_type_for(file_name: str) -> str:
    """MIME type inferred from the text after the last dot; '' when unknown."""
    ext = file_name.rsplit(".", 1)[-1]
    mime, _ = mimetypes.guess_type(f"file.{ext}") if ext else (None, None)
    return mime or ""


class FileResolver:
    """
    Map file names from the seed dataset to UploadFile records.

    A name whose base name already exists in storage resolves to that file;
    otherwise the local file is uploaded. Every upload is committed before the
    next name is looked up, so a name repeated later in the run (or in the
    same call) finds the earlier upload instead of uploading again.
    """

    def __init__(
        self,
        db: AsyncSession,
        upload_service: UploadService,
        source_dir: Path,
    ) -> None:
        self.db = db
        self.upload_service = upload_service
        self.source_dir = source_dir

    def get_file_data(self, file_name: str) -> FileData:
        """
        Stage a local file for upload.

        Raises:
            FileNotFoundError: If the file is not in the source directory.
        """
        filepath = self.source_dir / file_name
        return FileData(
            filepath=filepath,
            original_file_name=file_name,
            size=filepath.stat().st_size,
            mimetype=mime_type_for(file_name),
        )

    async def resolve(self, names: Sequence[str]) -> UploadFile | list[UploadFile]:
        """
        Resolve names to files.

        Returns existing files first, then newly uploaded ones (not input
        order). A single resulting file is returned unwrapped; otherwise the
        list is returned, which may be empty.

        Raises:
            FileNotFoundError: If a name needs uploading but has no local file.
        """
        existing: list[UploadFile] = []
        uploaded: list[UploadFile] = []

        for file_name in list(names):
            name = base_name(file_name)
            found = await self.upload_service.find_by_name(self.db, name)
            if found is not None:
                existing.append(found)
                continue

            file_data = self.get_file_data(file_name)
            files = await self.upload_service.upload(
                self.db,
                file_data,
                FileInfo(
                    name=name,
                    alternative_text=f"An image uploaded to the media library called {name}",
                    caption=name,
                ),
            )
            await self.db.commit()
            uploaded.append(files[0])

        all_files = existing + uploaded
        return all_files[0] if len(all_files) == 1 else all_files
