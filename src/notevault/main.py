"""
NoteVault Backend Application

FastAPI application entrypoint with async lifespan management.
Prepares the storage directories at startup and wires repositories,
services and the session middleware.

Start locally:
    uvicorn notevault.main:app --host 0.0.0.0 --port 8000 --reload
"""

import logging
import os
import secrets
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from notevault.api.v1.auth import router as auth_router
from notevault.api.v1.notes import router as notes_router
from notevault.api.v1.shares import router as shares_router
from notevault.api.v1.uploads import router as uploads_router
from notevault.core.config import Settings, settings
from notevault.core.errors import NoteVaultError
from notevault.core.logging import setup_logging
from notevault.repositories.index import IndexStore
from notevault.repositories.notes import NoteRepository
from notevault.repositories.uploads import UploadRepository
from notevault.services.auth import AuthContext
from notevault.services.sharing import ShareService

# Initialize logging before any log statements
setup_logging()
logger = logging.getLogger(__name__)


def prepare_storage(config: Settings) -> None:
    """Create DATA_DIR, NOTES_DIR and UPLOADS_DIR if they are missing."""
    for directory in (config.DATA_DIR, config.NOTES_DIR, config.UPLOADS_DIR):
        directory.mkdir(parents=True, exist_ok=True)


def _validation_message(exc: RequestValidationError) -> str:
    """First validation problem as a short sentence, e.g. 'name: Field required'."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {first.get('msg', 'invalid')}" if field else first.get("msg", "Invalid request")


def create_app(config: Settings | None = None) -> FastAPI:
    """
    Build the application for ``config`` (defaults to env-derived settings).

    Tests pass their own Settings pointing DATA_DIR at a temp directory.
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup:
            - Creates the storage directories
            - Builds the index store, repositories, share service and
              credential table (one instance each per running server)

        Shutdown:
            - Logs shutdown event for observability
        """
        logger.info("Starting %s...", config.PROJECT_NAME)
        logger.info("Data directory: %s", config.DATA_DIR)

        prepare_storage(config)

        index = IndexStore(config.INDEX_FILE)
        notes = NoteRepository(config, index)
        app.state.notes = notes
        app.state.uploads = UploadRepository(config, index)
        app.state.shares = ShareService(index, notes, share_page=config.SHARE_PAGE)
        app.state.auth = AuthContext.from_settings(config)
        logger.info("Loaded %d user account(s)", len(app.state.auth.usernames))

        yield  # Application runs here

        logger.info("Shutting down %s...", config.PROJECT_NAME)

    app = FastAPI(title=config.PROJECT_NAME, lifespan=lifespan)

    session_secret = config.SESSION_SECRET
    if not session_secret:
        logger.warning(
            "SESSION_SECRET not set - generated a random key; "
            "sessions will not survive a restart or be shared between workers"
        )
        session_secret = secrets.token_hex(32)

    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie="notevault_session",
        max_age=config.SESSION_MAX_AGE,
        same_site="lax",
    )

    @app.exception_handler(NoteVaultError)
    async def handle_domain_error(request: Request, exc: NoteVaultError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Render as 400 with the same {"error": ...} shape
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    app.include_router(notes_router, prefix="/api/v1/notes", tags=["Notes"])
    app.include_router(uploads_router, prefix="/api/v1/uploads", tags=["Uploads"])
    app.include_router(shares_router, prefix="/api/v1/shares", tags=["Shares"])
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["Auth"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint for load balancers and orchestrators."""
        return {
            "status": "ok",
            "service": "notevault",
            "environment": os.getenv("ENVIRONMENT", "unknown"),
        }

    return app


app = create_app()
