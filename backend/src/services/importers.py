"""
Importers for the demo content families.

Each importer writes its records one at a time through the entry writer, so a
bad record is logged and skipped while the rest of the batch goes through.
Assets named in the records are resolved (and uploaded when missing) first.
"""
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from services.block_rewriter import rewrite_blocks
from services.document_service import DocumentService
from services.entry_writer import create_entry
from services.file_resolver import FileResolver
from services.seed_types import WriteResult

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class SeedContext:
    """Collaborators shared by every importer in one seed run."""

    db: AsyncSession
    documents: DocumentService
    resolver: FileResolver
    clock: Callable[[], datetime] = field(default=utc_now)


async def import_categories(ctx: SeedContext, categories: Sequence[Record]) -> list[WriteResult]:
    """Write each category as given."""
    return [
        await create_entry(ctx.db, ctx.documents, "category", category)
        for category in categories
    ]


async def import_authors(ctx: SeedContext, authors: Sequence[Record]) -> list[WriteResult]:
    """Write each author with its `avatar` file name resolved to an uploaded file."""
    results = []
    for author in authors:
        avatar_name = author.get("avatar")
        avatar = await ctx.resolver.resolve([avatar_name]) if avatar_name else None
        results.append(
            await create_entry(ctx.db, ctx.documents, "author", {**author, "avatar": avatar}),
        )
    return results


async def import_articles(ctx: SeedContext, articles: Sequence[Record]) -> list[WriteResult]:
    """
    Write each article as published.

    The cover is the asset named `<slug>.jpg`; media and slider blocks have their
    file names resolved.
    """
    results = []
    for article in articles:
        cover = await ctx.resolver.resolve([f"{article.get('slug')}.jpg"])
        blocks = await rewrite_blocks(article.get("blocks") or [], ctx.resolver)
        results.append(
            await create_entry(
                ctx.db,
                ctx.documents,
                "article",
                {**article, "cover": cover, "blocks": blocks, "publishedAt": ctx.clock()},
            ),
        )
    return results


async def import_global(ctx: SeedContext, record: Record | None) -> WriteResult | None:
    """Write the global singleton with its favicon and default share image."""
    if record is None:
        return None
    favicon = await ctx.resolver.resolve(["favicon.png"])
    share_image = await ctx.resolver.resolve(["default-image.png"])
    return await create_entry(
        ctx.db,
        ctx.documents,
        "global",
        {
            **record,
            "favicon": favicon,
            "publishedAt": ctx.clock(),
            "defaultSeo": {**(record.get("defaultSeo") or {}), "shareImage": share_image},
        },
    )


async def import_about(ctx: SeedContext, record: Record | None) -> WriteResult | None:
    """Write the about singleton as published, with its blocks' files resolved."""
    if record is None:
        return None
    blocks = await rewrite_blocks(record.get("blocks") or [], ctx.resolver)
    return await create_entry(
        ctx.db,
        ctx.documents,
        "about",
        {**record, "blocks": blocks, "publishedAt": ctx.clock()},
    )
