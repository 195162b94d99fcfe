"""Tests for the knowledge-base importer."""
from types import MappingProxyType
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.entry import Entry
from schemas.seed import KnowledgeBaseSeed
from services.document_service import DocumentService
from services.importers import SeedContext
from services.knowledge_base_importer import (
    EMPTY_SLUG_MAP,
    import_articles,
    import_audiences,
    import_collections,
    import_knowledge_base,
    import_knowledge_base_global,
    import_release_notes,
    lookup,
    split_slug_fields,
)
from services.seed_types import EntryRef


@pytest.fixture
def update_spy(documents: DocumentService, monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    spy = AsyncMock(wraps=documents.update)
    monkeypatch.setattr(documents, "update", spy)
    return spy


def _connected_attributes(spy: AsyncMock) -> list[tuple[str, str]]:
    """(content type, attribute) of every connect update made."""
    return [
        (call.args[1], attribute)
        for call in spy.await_args_list
        for attribute in call.args[3]
    ]


async def _related_slugs(db: AsyncSession, documents: DocumentService, ref: EntryRef, ct: str, attr: str) -> list[str]:
    entry = await documents.find_one(db, ct, {"documentId": ref.document_id})
    return [e.slug for e in await documents.get_related(db, entry, attr)]


AUDIENCES = [
    {"name": "Editors", "slug": "editors"},
    {"name": "Developers", "slug": "developers"},
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_split_slug_fields() -> None:
    data, slugs = split_slug_fields(
        {"title": "T", "slug": "t", "audienceSlugs": ["a"], "articleSlugs": ["b"]},
    )
    assert data == {"title": "T", "slug": "t"}
    assert slugs == {"audienceSlugs": ["a"], "collectionSlugs": [], "articleSlugs": ["b"]}


def test_lookup_filters_unknown_slugs() -> None:
    refs = MappingProxyType({"a": EntryRef(document_id="1"), "b": EntryRef(document_id="2")})
    assert lookup(["b", "missing", "a"], refs) == [EntryRef(document_id="2"), EntryRef(document_id="1")]
    assert lookup(["missing"], refs) == []


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------


async def test_import_audiences_returns_read_only_map(db_session: AsyncSession, seed_context: SeedContext) -> None:
    audiences = await import_audiences(seed_context, AUDIENCES)

    assert set(audiences) == {"editors", "developers"}
    assert all(ref.document_id for ref in audiences.values())
    with pytest.raises(TypeError):
        audiences["new"] = EntryRef(id=1)  # type: ignore[index]


async def test_failed_and_slugless_records_are_not_mapped(
    db_session: AsyncSession, seed_context: SeedContext,
) -> None:
    audiences = await import_audiences(
        seed_context,
        [
            {"name": "Editors", "slug": "editors"},
            {"slug": "nameless"},
            {"name": "No slug"},
        ],
    )
    assert list(audiences) == ["editors"]


async def test_absent_families_yield_empty_maps(db_session: AsyncSession, seed_context: SeedContext) -> None:
    assert await import_audiences(seed_context, None) is EMPTY_SLUG_MAP
    assert await import_collections(seed_context, None, EMPTY_SLUG_MAP) is EMPTY_SLUG_MAP
    assert await import_articles(seed_context, None, EMPTY_SLUG_MAP, EMPTY_SLUG_MAP) is EMPTY_SLUG_MAP
    assert await import_release_notes(seed_context, None, EMPTY_SLUG_MAP, EMPTY_SLUG_MAP) == []
    assert await import_knowledge_base_global(seed_context, None) is None


async def test_collections_connect_audiences_and_strip_slug_fields(
    db_session: AsyncSession, seed_context: SeedContext, documents: DocumentService,
) -> None:
    audiences = await import_audiences(seed_context, AUDIENCES)
    collections = await import_collections(
        seed_context,
        [{"title": "Start", "slug": "start", "audienceSlugs": ["developers", "editors"]}],
        audiences,
    )

    entry = await documents.find_one(db_session, "knowledge-base-collection", {"slug": "start"})
    assert "audienceSlugs" not in entry.data
    assert await _related_slugs(
        db_session, documents, collections["start"], "knowledge-base-collection", "audiences",
    ) == ["developers", "editors"]


async def test_unknown_audience_slug_is_filtered(
    db_session: AsyncSession,
    seed_context: SeedContext,
    documents: DocumentService,
    update_spy: AsyncMock,
) -> None:
    audiences = await import_audiences(seed_context, AUDIENCES)
    collections = await import_collections(
        seed_context,
        [
            {"title": "Mixed", "slug": "mixed", "audienceSlugs": ["editors", "admins"]},
            {"title": "Orphan", "slug": "orphan", "audienceSlugs": ["admins"]},
        ],
        audiences,
    )

    assert set(collections) == {"mixed", "orphan"}
    [call] = update_spy.await_args_list
    assert call.args[3] == {
        "audiences": {"connect": [{"documentId": audiences["editors"].document_id}]},
    }
    assert await _related_slugs(
        db_session, documents, collections["orphan"], "knowledge-base-collection", "audiences",
    ) == []


async def test_articles_connect_audiences_and_collections(
    db_session: AsyncSession, seed_context: SeedContext, documents: DocumentService,
) -> None:
    audiences = await import_audiences(seed_context, AUDIENCES)
    collections = await import_collections(
        seed_context, [{"title": "Start", "slug": "start"}], audiences,
    )
    articles = await import_articles(
        seed_context,
        [{
            "title": "Intro",
            "slug": "intro",
            "audienceSlugs": ["editors"],
            "collectionSlugs": ["start"],
        }],
        audiences,
        collections,
    )

    ref = articles["intro"]
    assert await _related_slugs(
        db_session, documents, ref, "knowledge-base-article", "audiences",
    ) == ["editors"]
    assert await _related_slugs(
        db_session, documents, ref, "knowledge-base-article", "collections",
    ) == ["start"]


async def test_release_note_skips_articles_connect_when_article_failed(
    db_session: AsyncSession,
    seed_context: SeedContext,
    documents: DocumentService,
    update_spy: AsyncMock,
) -> None:
    audiences = await import_audiences(seed_context, AUDIENCES)
    # The only article has no title, so its write fails
    articles = await import_articles(
        seed_context, [{"slug": "intro"}], audiences, EMPTY_SLUG_MAP,
    )
    assert "intro" not in articles

    [result] = await import_release_notes(
        seed_context,
        [{"title": "1.0", "slug": "v1", "articleSlugs": ["intro"], "audienceSlugs": ["editors"]}],
        audiences,
        articles,
    )

    assert result.ok
    assert _connected_attributes(update_spy) == [("knowledge-base-release-note", "audiences")]
    entry = await documents.find_one(db_session, "knowledge-base-release-note", {"slug": "v1"})
    assert "articleSlugs" not in entry.data


async def test_failed_write_skips_linking(
    db_session: AsyncSession, seed_context: SeedContext, update_spy: AsyncMock,
) -> None:
    audiences = await import_audiences(seed_context, AUDIENCES)
    collections = await import_collections(
        seed_context, [{"slug": "untitled", "audienceSlugs": ["editors"]}], audiences,
    )

    assert collections == {}
    update_spy.assert_not_awaited()


# ---------------------------------------------------------------------------
# Whole graph
# ---------------------------------------------------------------------------


async def test_import_knowledge_base(
    db_session: AsyncSession, seed_context: SeedContext, documents: DocumentService,
) -> None:
    knowledge_base = KnowledgeBaseSeed.model_validate({
        "global": {"title": "Help Center"},
        "audiences": AUDIENCES,
        "collections": [{"title": "Start", "slug": "start", "audienceSlugs": ["editors"]}],
        "articles": [{
            "title": "Intro",
            "slug": "intro",
            "audienceSlugs": ["editors", "developers"],
            "collectionSlugs": ["start"],
        }],
        "releaseNotes": [{"title": "1.0", "slug": "v1", "articleSlugs": ["intro"]}],
    })

    await import_knowledge_base(seed_context, knowledge_base)

    counts = dict((await db_session.execute(
        select(Entry.content_type, func.count()).group_by(Entry.content_type),
    )).all())
    assert counts == {
        "api::knowledge-base-global.knowledge-base-global": 1,
        "api::knowledge-base-audience.knowledge-base-audience": 2,
        "api::knowledge-base-collection.knowledge-base-collection": 1,
        "api::knowledge-base-article.knowledge-base-article": 1,
        "api::knowledge-base-release-note.knowledge-base-release-note": 1,
    }
    note = await documents.find_one(db_session, "knowledge-base-release-note", {"slug": "v1"})
    assert note.published_at is not None
    assert [e.slug for e in await documents.get_related(db_session, note, "articles")] == ["intro"]


async def test_import_knowledge_base_partial(db_session: AsyncSession, seed_context: SeedContext) -> None:
    await import_knowledge_base(seed_context, KnowledgeBaseSeed.model_validate({"audiences": AUDIENCES}))
    await import_knowledge_base(seed_context, None)

    assert await db_session.scalar(select(func.count()).select_from(Entry)) == 2
