"""Attach already-created entries to a parent through a connect-only update."""
import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from services.document_service import DocumentService
from services.seed_types import EntryRef

logger = logging.getLogger(__name__)


async def connect_relation(
    db: AsyncSession,
    documents: DocumentService,
    content_type: str,
    parent: EntryRef,
    attribute: str,
    children: Iterable[Any],
) -> None:
    """
    Connect `children` to `parent.<attribute>` and commit.

    Does nothing when the parent has no identifier or when no child has one.
    Connect is additive: existing edges are kept and already-linked children
    are skipped. Store failures (e.g. a parent that no longer exists) propagate.
    """
    if not parent:
        return

    refs = [ref for ref in (EntryRef.from_entry(child) for child in children) if ref]
    if not refs:
        return

    await documents.update(
        db,
        content_type,
        parent.identifier,
        {attribute: {"connect": [ref.as_relation() for ref in refs]}},
    )
    await db.commit()
    logger.debug("Connected %d %s to %s %s", len(refs), attribute, content_type, parent.identifier)
