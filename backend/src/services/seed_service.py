"""
Seed orchestration: load the demo dataset and import it once per database.

The run gate makes the whole import happen at most once. Everything after it
runs sequentially: permissions, then categories, authors, articles, global,
about and the knowledge base, in that order, since articles reference authors
and categories and the knowledge-base phases reference each other.
"""
import json
import logging
from enum import Enum
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.config import Settings
from schemas.seed import SeedDataset
from services.document_service import document_service
from services.file_resolver import FileResolver
from services.importers import (
    SeedContext,
    import_about,
    import_articles,
    import_authors,
    import_categories,
    import_global,
)
from services.knowledge_base_importer import import_knowledge_base
from services.permission_service import set_public_permissions
from services.run_gate import is_first_run
from services.upload_service import UploadService

logger = logging.getLogger(__name__)

PUBLIC_ACTIONS = ["find", "findOne"]

# Controllers the public role may read once the demo content is in place
PUBLIC_CONTROLLERS = [
    "article",
    "category",
    "author",
    "global",
    "about",
    "knowledge-base-global",
    "knowledge-base-audience",
    "knowledge-base-collection",
    "knowledge-base-article",
    "knowledge-base-release-note",
]


class SeedOutcome(str, Enum):
    """Result of a seed run."""

    SEEDED = "seeded"
    ALREADY_SEEDED = "already_seeded"


def load_seed_dataset(path: Path) -> SeedDataset:
    """
    Load and validate the seed dataset file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the file does not have the dataset shape.
    """
    with path.open(encoding="utf-8") as f:
        return SeedDataset.model_validate(json.load(f))


async def import_seed_data(ctx: SeedContext, dataset: SeedDataset) -> None:
    """Grant public read access, then import every family in dependency order."""
    await set_public_permissions(
        ctx.db, {controller: PUBLIC_ACTIONS for controller in PUBLIC_CONTROLLERS},
    )
    await ctx.db.commit()

    await import_categories(ctx, dataset.categories)
    await import_authors(ctx, dataset.authors)
    await import_articles(ctx, dataset.articles)
    await import_global(ctx, dataset.global_)
    await import_about(ctx, dataset.about)
    await import_knowledge_base(ctx, dataset.knowledge_base)


def build_seed_context(db: AsyncSession, settings: Settings) -> SeedContext:
    upload_service = UploadService(settings.upload_dir, settings.upload_url_prefix)
    return SeedContext(
        db=db,
        documents=document_service,
        resolver=FileResolver(db, upload_service, settings.seed_uploads_dir),
    )


async def seed_example_app(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    dataset: SeedDataset | None = None,
    *,
    data_path: Path | None = None,
) -> SeedOutcome:
    """
    Import the demo content unless this database has been seeded before.

    When no dataset is given it is loaded from `data_path`, falling back to
    `settings.seed_data_path`, and only after the run gate passes. Errors
    from the import propagate; whatever was committed before the error stays.
    """
    async with session_factory() as db:
        if not await is_first_run(db, settings.environment):
            logger.info(
                "Seed data has already been imported. "
                "We cannot reimport unless you clear your database first.",
            )
            return SeedOutcome.ALREADY_SEEDED

        logger.info("Setting up the template...")
        if dataset is None:
            dataset = load_seed_dataset(data_path or settings.seed_data_path)
        await import_seed_data(build_seed_context(db, settings), dataset)
        logger.info("Ready to go")
        return SeedOutcome.SEEDED
