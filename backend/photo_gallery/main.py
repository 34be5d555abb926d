"""
Photo Gallery — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       static photo serving and lifecycle management in one place.
How:   Factory pattern: create_app(settings) returns a configured FastAPI
       instance whose services all share that one immutable Settings object.
Who:   uvicorn (photo_gallery.main:app), `python -m photo_gallery`, tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────┐ ┌────────┐   │
    │  │  Req ID  │→│ Logging  │→│ SecHdrs │→│  CORS  │   │
    │  └──────────┘ └──────────┘ └─────────┘ └────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  /api/folders  /api/photos  /api/upload             │
    │  /api/system   /health      /photos/* (static)      │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Conflict→409 │ 500 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → photo root + default folder → log configuration
    Shutdown: log only (no pooled resources to release)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from photo_gallery import __version__
from photo_gallery.config import Settings, get_settings
from photo_gallery.exceptions import (
    ConflictError,
    FileStorageError,
    NotFoundError,
    PhotoGalleryError,
    ValidationError,
)
from photo_gallery.middleware.logging import RequestLoggingMiddleware
from photo_gallery.middleware.request_id import RequestIDMiddleware, request_id_var
from photo_gallery.middleware.security_headers import SecurityHeadersMiddleware
from photo_gallery.routes import folders, photos, system, upload
from photo_gallery.services.gallery_service import GalleryService
from photo_gallery.services.path_guard import PathGuard
from photo_gallery.services.storage import LocalFileStorage
from photo_gallery.services.upload_service import UploadService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Our access logger already covers what uvicorn's would print
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: set up logging, create the photo root and the default upload
    folder, log the effective configuration. Shutdown: log.
    """
    settings: Settings = app.state.settings

    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("Photo Gallery %s starting up...", __version__)

    storage = app.state.storage
    root = app.state.gallery_service.root
    await storage.create_directory(root, exist_ok=True)
    await storage.create_directory(root / settings.default_folder, exist_ok=True)

    logger.info("Photo directory: %s", root)
    logger.info(
        "Upload limits: %d files x %d bytes, extensions: %s",
        settings.max_files,
        settings.max_file_size,
        ", ".join(settings.allowed_extensions_list),
    )
    logger.info("Environment: %s", settings.environment)
    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    logger.info("Photo Gallery shutting down...")
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(code: str, message: str, details: Optional[dict] = None) -> dict:
    body = {
        "error": code,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and a JSON body with `error`.

    Handler hierarchy:
        ValidationError (+ InvalidPath, UnsupportedMediaType,
                         PayloadTooLarge, TooManyFiles)   → 400
        NotFoundError                                     → 404
        ConflictError                                     → 409
        FileStorageError                                  → 500 (generic message)
        PhotoGalleryError (base)                          → 500
        HTTPException (unknown routes, static misses)     → its status
        Exception (fallback)                              → 500

    Security: 5xx responses never carry paths or OS errors. Details are
    logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Client sent invalid input; the message says what is wrong."""
        rid = request_id_var.get("")
        logger.warning("[%s] %s: %s", rid, exc.error_code, exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body(exc.error_code, exc.message, exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body(exc.error_code, exc.message),
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return JSONResponse(
            status_code=409,
            content=_error_body(exc.error_code, exc.message, exc.context),
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        """File system error: generic message, details logged."""
        rid = request_id_var.get("")
        logger.error("[%s] File storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(PhotoGalleryError)
    async def handle_gallery_error(request: Request, exc: PhotoGalleryError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled gallery error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unknown routes and missing static files keep the JSON error format."""
        if exc.status_code == 404:
            body = _error_body("not_found", "The requested resource was not found")
        else:
            body = _error_body("http_error", str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Stack trace is logged server-side only, never returned.
        """
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration for this instance. Defaults to the settings
                  read from the environment (get_settings()).

    The services are built here, once, and placed on app.state; route
    handlers receive them through photo_gallery.dependencies.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Photo Gallery API",
        description=(
            "Photo gallery file server: organize photos into folders, list them "
            "with pagination, upload and delete."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Services ──────────────────────────────────────────────────────────
    storage = LocalFileStorage()
    path_guard = PathGuard(settings)
    app.state.settings = settings
    app.state.storage = storage
    app.state.gallery_service = GalleryService(settings, storage=storage, path_guard=path_guard)
    app.state.upload_service = UploadService(settings, storage=storage, path_guard=path_guard)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added runs first)
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers refuse credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(folders.router)
    app.include_router(photos.router)
    app.include_router(upload.router)
    app.include_router(system.router)

    # Read-only mirror of the photo root. check_dir=False: the root is
    # created during startup, after this mount is declared.
    app.mount(
        "/photos",
        StaticFiles(directory=Path(settings.photo_dir), check_dir=False),
        name="photos",
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `photo_gallery.main:app` to be importable
app = create_app()
