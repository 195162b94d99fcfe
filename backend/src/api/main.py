"""FastAPI application entry point."""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.routers import content, health, welcome_guides
from core.config import get_settings
from db.session import engine


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - dispose the engine's pool on shutdown."""
    yield
    await engine.dispose()


app_settings = get_settings()

app = FastAPI(
    title="Content API",
    description="Read API for seeded demo content, articles and the knowledge base.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded media is served by the local provider
app.mount(
    app_settings.upload_url_prefix,
    StaticFiles(directory=app_settings.upload_dir, check_dir=False),
    name="uploads",
)

app.include_router(health.router)
# Custom routes first: the generic content routes would otherwise match them
app.include_router(welcome_guides.router, prefix=app_settings.api_prefix)
app.include_router(content.router, prefix=app_settings.api_prefix)
