"""
Employee records API - application setup and user service lifecycle.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.middleware import (
    AuditLoggingMiddleware,
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    register_exception_handlers,
)
from app.routes import auth, health, users
from app.services.users import UserService
from app.services.users.seed import seed_sample_users

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the user service on startup and release it on shutdown."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    # Fail fast on an unusable signing configuration
    settings.get_jwt_config()

    service = UserService(cache_ttl_seconds=settings.USER_CACHE_TTL_SECONDS)
    if settings.SEED_SAMPLE_DATA:
        seed_sample_users(service)
    app.state.user_service = service

    logger.info("User service initialized", **service.stats())

    yield

    logger.info("Application shutting down")
    try:
        service.close()
    except Exception as e:
        logger.error("Error closing user service", error=str(e))
    else:
        logger.info("User service closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Employee Records API",
        description="In-memory employee user records with indexed lookups and cached queries",
        version="0.1.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Last added runs first: RequestContext -> CORS -> Audit -> ErrorHandling -> routes
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(AuditLoggingMiddleware)
    if settings.is_development():
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ALLOWED_ORIGINS,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "Location"],
        )
    app.add_middleware(RequestContextMiddleware)

    # Include routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
