"""Create single entries for the seed pipeline without aborting the batch."""
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from services.document_service import DocumentService
from services.seed_types import WriteResult

logger = logging.getLogger(__name__)


async def create_entry(
    db: AsyncSession,
    documents: DocumentService,
    content_type: str,
    record: Mapping[str, Any],
) -> WriteResult:
    """
    Create one entry and commit it.

    Any failure is rolled back, logged with the content type and record, and
    returned as a failed WriteResult so the caller can skip dependent work
    (relation linking, slug map entries) and carry on with the batch.
    """
    try:
        entry = await documents.create(db, content_type, record)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(
            "Failed to create %s entry %r: %s",
            content_type,
            dict(record),
            e,
            exc_info=e,
        )
        return WriteResult.failed(content_type, e)
    return WriteResult.created(content_type, entry)
