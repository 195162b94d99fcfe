"""Pytest fixtures for testing."""
import os

# Must be set before any app imports that trigger Settings validation.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from collections.abc import AsyncGenerator  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.config import Settings  # noqa: E402
from db.session import create_session_factory  # noqa: E402
from models.base import Base  # noqa: E402
from services.document_service import DocumentService  # noqa: E402
from services.file_resolver import FileResolver  # noqa: E402
from services.importers import SeedContext  # noqa: E402
from services.upload_service import UploadService  # noqa: E402

# Image-like payloads of known size (2000 and 502 bytes); only the extension
# matters to the pipeline.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 1992
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 496 + b"\xff\xd9"

SEED_FILES = {
    "jane.png": PNG_BYTES,
    "john.png": PNG_BYTES,
    "favicon.png": PNG_BYTES,
    "default-image.png": PNG_BYTES,
    "hello-world.jpg": JPEG_BYTES,
    "second-post.jpg": JPEG_BYTES,
    "photo.jpg": JPEG_BYTES,
    "photo-2.jpg": JPEG_BYTES,
    "notes.unknownext": b"plain",
}


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create a fresh in-memory database for each test.

    StaticPool keeps a single connection so every session in the test sees
    the same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return create_session_factory(async_engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Create an async session for the test database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed_uploads_dir(tmp_path: Path) -> Path:
    """Local asset directory the file resolver reads from."""
    source = tmp_path / "seed_uploads"
    source.mkdir()
    for name, payload in SEED_FILES.items():
        (source / name).write_bytes(payload)
    return source


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Directory uploaded files are copied into."""
    return tmp_path / "public" / "uploads"


@pytest.fixture
def test_settings(tmp_path: Path, seed_uploads_dir: Path, upload_dir: Path) -> Settings:
    """Settings pointing every path at the test's temporary directory."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        APP_ENV="test",
        SEED_DATA_PATH=str(tmp_path / "data.json"),
        SEED_UPLOADS_DIR=str(seed_uploads_dir),
        UPLOAD_DIR=str(upload_dir),
    )


@pytest.fixture
def upload_service(upload_dir: Path) -> UploadService:
    return UploadService(upload_dir, "/uploads")


@pytest.fixture
def resolver(
    db_session: AsyncSession,
    upload_service: UploadService,
    seed_uploads_dir: Path,
) -> FileResolver:
    return FileResolver(db_session, upload_service, seed_uploads_dir)


@pytest.fixture
def documents() -> DocumentService:
    return DocumentService()


@pytest.fixture
def seed_context(
    db_session: AsyncSession,
    documents: DocumentService,
    resolver: FileResolver,
) -> SeedContext:
    return SeedContext(db=db_session, documents=documents, resolver=resolver)


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    test_settings: Settings,
) -> AsyncGenerator[AsyncClient]:
    """
    Create a test client backed by the test database.

    Each request gets its own session that commits on success, like the real
    dependency. Tests that prepare data with `db_session` must commit it first.
    """
    from api.main import app
    from core.config import get_settings
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
