"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from task_search.config import get_settings
from task_search.infrastructure.dependencies import get_lexicon_registry
from task_search.infrastructure.logging.log_config import setup_logging
from task_search.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: configure logging and load the lexicon."""
    settings = get_settings()
    setup_logging()

    snapshot = get_lexicon_registry().current()
    logger.info(
        "Task search ready: lexicon=%d words, synonyms=%d, semantic=%s",
        len(snapshot.lexicon),
        len(snapshot.synonyms),
        "enabled" if settings.openrouter_api_key.strip() else "disabled",
    )

    yield


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "task_search.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
