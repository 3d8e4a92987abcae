"""FastAPI application for the Mneme JSON API."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mneme import __version__
from mneme.core.errors import (
    ConfigError,
    InvalidQuality,
    MnemeError,
    NotFound,
    StoreUnavailable,
    ValidationFailed,
)
from mneme.web.routes import languages_router, reviews_router, stats_router, vocabulary_router

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[MnemeError], int] = {
    NotFound: 404,
    InvalidQuality: 422,
    ValidationFailed: 422,
    StoreUnavailable: 503,
    ConfigError: 500,
}


async def handle_mneme_error(request: Request, exc: MnemeError) -> JSONResponse:
    """Render a core error as ``{"error": {"type", "message"}}``."""
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": type(exc).__name__, "message": str(exc)}},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Mneme",
        description="Vocabulary knowledge base with spaced-repetition review",
        version=__version__,
    )

    app.add_exception_handler(MnemeError, handle_mneme_error)

    # Routes
    app.include_router(reviews_router, prefix="/reviews", tags=["reviews"])
    app.include_router(languages_router, prefix="/languages", tags=["languages"])
    app.include_router(vocabulary_router, prefix="/vocabulary", tags=["vocabulary"])
    app.include_router(stats_router, prefix="/stats", tags=["stats"])

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Create the app instance for uvicorn
app = create_app()
