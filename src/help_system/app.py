"""Main FastAPI application module.

This module builds the FastAPI application around a Store and registers all
route handlers.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from help_system import __version__
from help_system.api.routes import admin, articles, auth, backup, groups, queries
from help_system.config import API_HOST, API_PORT, CORS_ALLOWED_ORIGINS
from help_system.core.database import Store
from help_system.core.exceptions import HelpSystemError
from help_system.core.logging_config import setup_logging
from help_system.utils.codec import Codec, get_default_codec

logger = logging.getLogger(__name__)

# Each error kind maps to exactly one HTTP status
ERROR_STATUS = {
    "auth_failed": 401,
    "not_found": 404,
    "duplicate_key": 409,
    "invalid_argument": 400,
    "otp_expired": 410,
    "otp_invalid": 401,
    "permission_denied": 403,
    "backend_unavailable": 503,
    "backup_malformed": 422,
    "codec_failure": 500,
}


def handle_help_system_error(request: Request, exc: HelpSystemError) -> JSONResponse:
    status = ERROR_STATUS.get(exc.kind, 500)
    if status >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status, content={"error": exc.kind, "detail": str(exc)}
    )


def create_app(store: Optional[Store] = None, codec: Optional[Codec] = None) -> FastAPI:
    """Build the API application.

    Args:
        store: Store to serve from. A store on DATABASE_URL is created when
            omitted. It is initialized here and torn down on shutdown.
        codec: Codec for group article bodies. Defaults to the one
            configured by GROUP_CODEC_KEY.

    Returns:
        The FastAPI application.
    """
    store = (store or Store()).init()

    app = FastAPI(
        title="Help System API",
        description="Help articles, special access groups and student questions.",
        version=__version__,
    )
    app.state.store = store
    app.state.codec = codec if codec is not None else get_default_codec()

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HelpSystemError, handle_help_system_error)

    # Register route handlers
    app.include_router(auth.router)
    app.include_router(admin.router)
    app.include_router(articles.router)
    app.include_router(groups.router)
    app.include_router(groups.article_router)
    app.include_router(queries.router)
    app.include_router(backup.router)

    @app.on_event("shutdown")
    def teardown_store() -> None:
        store.teardown()

    @app.get("/", summary="API root", tags=["Info"])
    def root() -> dict:
        """Return API information and documentation links."""
        return {
            "name": "Help System API",
            "version": __version__,
            "docs": {
                "swagger": "/docs",
                "redoc": "/redoc",
            },
            "health": "/api/health",
        }

    @app.get("/api/health", summary="Health check", tags=["Health"])
    def health() -> dict:
        return {"status": "ok", "store": store.is_initialized}

    return app


def main() -> None:
    import uvicorn

    setup_logging()
    server_url = f"http://{API_HOST}:{API_PORT}"
    logger.info("Starting Help System API on %s (docs at %s/docs)", server_url, server_url)
    uvicorn.run(create_app(), host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
