"""
Importer for the knowledge-base content graph.

Phases run strictly in order: global, audiences, collections, articles, release
notes. Records reference each other by slug (`audienceSlugs`, `collectionSlugs`,
`articleSlugs`). Each phase returns a read-only slug map of what it created and
later phases take those maps as arguments, so a phase can only see entries
that earlier phases actually wrote.
"""
import logging
from collections.abc import Iterable, Sequence
from types import MappingProxyType
from typing import Any

from schemas.seed import KnowledgeBaseSeed
from services.entry_writer import create_entry
from services.importers import Record, SeedContext
from services.relation_linker import connect_relation
from services.seed_types import EntryRef, SlugMap, WriteResult

logger = logging.getLogger(__name__)

EMPTY_SLUG_MAP: SlugMap = MappingProxyType({})

SLUG_FIELDS = ("audienceSlugs", "collectionSlugs", "articleSlugs")


def split_slug_fields(record: Record) -> tuple[dict[str, Any], dict[str, list[str]]]:
    """Separate the slug reference fields from the data written to the store."""
    data = {k: v for k, v in record.items() if k not in SLUG_FIELDS}
    slugs = {k: list(record.get(k) or []) for k in SLUG_FIELDS}
    return data, slugs


def lookup(slugs: Iterable[str], slug_map: SlugMap) -> list[EntryRef]:
    """Refs for the slugs present in `slug_map`; unknown slugs are dropped."""
    return [slug_map[slug] for slug in slugs if slug in slug_map]


def _remember(slug_map: dict[str, EntryRef], result: WriteResult, record: Record) -> None:
    key = result.slug or record.get("slug")
    if key:
        slug_map[key] = result.ref


async def import_knowledge_base_global(ctx: SeedContext, record: Record | None) -> WriteResult | None:
    if record is None:
        return None
    return await create_entry(
        ctx.db, ctx.documents, "knowledge-base-global", {**record, "publishedAt": ctx.clock()},
    )


async def import_audiences(ctx: SeedContext, records: Sequence[Record] | None) -> SlugMap:
    """Write audiences and return their slug map."""
    if records is None:
        return EMPTY_SLUG_MAP
    audiences: dict[str, EntryRef] = {}
    for record in records:
        result = await create_entry(
            ctx.db, ctx.documents, "knowledge-base-audience", {**record, "publishedAt": ctx.clock()},
        )
        if result.ok:
            _remember(audiences, result, record)
    return MappingProxyType(audiences)


async def import_collections(
    ctx: SeedContext,
    records: Sequence[Record] | None,
    audiences: SlugMap,
) -> SlugMap:
    """Write collections, connect their audiences, and return their slug map."""
    if records is None:
        return EMPTY_SLUG_MAP
    collections: dict[str, EntryRef] = {}
    for record in records:
        data, slugs = split_slug_fields(record)
        result = await create_entry(
            ctx.db, ctx.documents, "knowledge-base-collection", {**data, "publishedAt": ctx.clock()},
        )
        if not result.ok:
            continue
        await connect_relation(
            ctx.db, ctx.documents, "knowledge-base-collection", result.ref,
            "audiences", lookup(slugs["audienceSlugs"], audiences),
        )
        _remember(collections, result, record)
    return MappingProxyType(collections)


async def import_articles(
    ctx: SeedContext,
    records: Sequence[Record] | None,
    audiences: SlugMap,
    collections: SlugMap,
) -> SlugMap:
    """Write articles, connect audiences and collections, and return their slug map."""
    if records is None:
        return EMPTY_SLUG_MAP
    articles: dict[str, EntryRef] = {}
    for record in records:
        data, slugs = split_slug_fields(record)
        result = await create_entry(
            ctx.db, ctx.documents, "knowledge-base-article", {**data, "publishedAt": ctx.clock()},
        )
        if not result.ok:
            continue
        await connect_relation(
            ctx.db, ctx.documents, "knowledge-base-article", result.ref,
            "audiences", lookup(slugs["audienceSlugs"], audiences),
        )
        await connect_relation(
            ctx.db, ctx.documents, "knowledge-base-article", result.ref,
            "collections", lookup(slugs["collectionSlugs"], collections),
        )
        _remember(articles, result, record)
    return MappingProxyType(articles)


async def import_release_notes(
    ctx: SeedContext,
    records: Sequence[Record] | None,
    audiences: SlugMap,
    articles: SlugMap,
) -> list[WriteResult]:
    """Write release notes and connect their audiences and articles."""
    if records is None:
        return []
    results = []
    for record in records:
        data, slugs = split_slug_fields(record)
        result = await create_entry(
            ctx.db, ctx.documents, "knowledge-base-release-note", {**data, "publishedAt": ctx.clock()},
        )
        results.append(result)
        if not result.ok:
            continue
        await connect_relation(
            ctx.db, ctx.documents, "knowledge-base-release-note", result.ref,
            "audiences", lookup(slugs["audienceSlugs"], audiences),
        )
        await connect_relation(
            ctx.db, ctx.documents, "knowledge-base-release-note", result.ref,
            "articles", lookup(slugs["articleSlugs"], articles),
        )
    return results


async def import_knowledge_base(ctx: SeedContext, knowledge_base: KnowledgeBaseSeed | None) -> None:
    """Run every knowledge-base phase in dependency order."""
    if knowledge_base is None:
        return
    await import_knowledge_base_global(ctx, knowledge_base.global_)
    audiences = await import_audiences(ctx, knowledge_base.audiences)
    collections = await import_collections(ctx, knowledge_base.collections, audiences)
    articles = await import_articles(ctx, knowledge_base.articles, audiences, collections)
    await import_release_notes(ctx, knowledge_base.release_notes, audiences, articles)
    logger.info(
        "Imported knowledge base: %d audiences, %d collections, %d articles",
        len(audiences), len(collections), len(articles),
    )
