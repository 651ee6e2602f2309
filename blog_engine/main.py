"""
Main FastAPI application for the blog engine.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from blog_engine.config import APP_DEBUG, LOG_LEVEL, SEED_ON_STARTUP
from blog_engine.errors import EngineError
from blog_engine.routes.comments import router as comments_router
from blog_engine.routes.health import router as health_router
from blog_engine.routes.media import audit_router, router as media_router
from blog_engine.routes.posts import router as posts_router
from blog_engine.routes.reports import router as reports_router
from blog_engine.routes.social import notifications_router, router as social_router
from blog_engine.routes.taxonomy import categories_router, tags_router
from blog_engine.routes.users import router as users_router
from blog_engine.services.seeder import seed_store
from blog_engine.store import Store

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(store: Optional[Store] = None, seed: bool = SEED_ON_STARTUP) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Store to serve; a new one is created when omitted
        seed: Fill a newly created store with seed data

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Blog Engine API",
        description="Query and mutation engine over an in-memory blog graph",
        version="1.0.0",
        debug=APP_DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if store is None:
        store = Store()
        if seed:
            seed_store(store)
    app.state.store = store

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers
    @app.exception_handler(EngineError)
    async def engine_exception_handler(request: Request, exc: EngineError):
        """Handle rejected input and stale cursors."""
        return JSONResponse(
            status_code=400,
            content={
                "error_code": exc.code,
                "message": exc.message,
                "details": exc.details,
            },
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        """Handle filter models that failed validation inside a dependency."""
        return JSONResponse(
            status_code=422,
            content={
                "error_code": "VALIDATION_ERROR",
                "message": "Invalid request parameters",
                "details": exc.errors(include_url=False, include_context=False),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other unhandled exceptions."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if app.debug else "Internal server error",
            },
        )

    # Include routers
    app.include_router(users_router)
    app.include_router(posts_router)
    app.include_router(categories_router)
    app.include_router(tags_router)
    app.include_router(comments_router)
    app.include_router(social_router)
    app.include_router(notifications_router)
    app.include_router(media_router)
    app.include_router(audit_router)
    app.include_router(reports_router)
    app.include_router(health_router)

    @app.get("/")
    async def root():
        return {"message": "Blog Engine API", "status": "healthy", "version": "1.0.0"}

    return app


configure_logging()

# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("blog_engine.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
