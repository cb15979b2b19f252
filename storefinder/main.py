"""FastAPI application entry point.

Store Finder - a directory of stores with tags, reviews, hearts and a map.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from storefinder.errors import NotFoundError, StoreFinderError, ValidationError
from storefinder.routes import api_router
from storefinder.routes.deps import back_url, redirect
from storefinder.schemas import ErrorDetail, ErrorResponse
from storefinder.services.web_session import RedisSessionBackend, SessionBackend, SessionMiddleware, flash
from storefinder.settings import get_settings
from storefinder.stores.postgres import init_db, close_db, ping_db
from storefinder.stores.redis import init_redis, close_redis

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    try:
        await init_db()
        await ping_db()
        logger.info("Postgres connected")
    except Exception:
        logger.exception("Postgres init failed")

    try:
        await init_redis()
    except Exception:
        logger.exception("Redis init failed")

    yield

    # Shutdown
    await close_redis()
    await close_db()


def _wants_json(request: Request, exc: StoreFinderError) -> bool:
    if request.url.path.startswith("/api/"):
        return True
    # Missing pages 404; a missing target of a form post flashes and goes back
    return isinstance(exc, NotFoundError) and request.method == "GET"


def error_response(exc: StoreFinderError) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message, detail=exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def create_app(session_backend: SessionBackend | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Store directory with tags, reviews, hearts and geo search",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        SessionMiddleware,
        backend=session_backend or RedisSessionBackend(),
        cookie_name=settings.session_cookie_name,
        max_age=settings.session_max_age,
        https_only=settings.session_https_only,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreFinderError)
    async def domain_exception_handler(request: Request, exc: StoreFinderError) -> Response:
        """JSON error payload for the API, flash + redirect for browser pages."""
        if _wants_json(request, exc):
            return error_response(exc)

        messages = exc.errors if isinstance(exc, ValidationError) else [exc.message]
        for message in messages:
            flash(request, "error", message)
        return redirect(exc.redirect_to or back_url(request))

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": str(exc) if settings.debug else "Internal server error",
                    "detail": None,
                }
            },
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    app.include_router(api_router)

    # Uploaded store photos
    app.mount("/uploads", StaticFiles(directory=settings.uploads_dir, check_dir=False), name="uploads")

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefinder.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
