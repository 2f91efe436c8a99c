# Third-party imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

# Local application imports
from registry.core.exceptions import StoreUnavailable
from registry.core.monitoring.logging import get_logger
from registry.core.store import get_store, redis_client
from registry.settings import settings

# Set up the main application logger
logger = get_logger("registry")


def _setup_sentry_fastapi() -> None:
    """Add the FastAPI integration on top of the logging setup in core/monitoring/sentry.py"""
    if settings.ENVIRONMENT != "production" or not settings.SENTRY_DSN:
        return

    logger.info(f"Initializing Sentry in {settings.ENVIRONMENT} environment")
    client = sentry_sdk.get_client()
    if not client.is_active():
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            integrations=[FastApiIntegration()],
            environment=settings.ENVIRONMENT,
            traces_sample_rate=1.0,
        )
        return

    current_options = client.options
    integrations = list(current_options.get("integrations", []))
    if any(isinstance(integration, FastApiIntegration) for integration in integrations):
        return

    # Reinitialize with the existing integrations so the logging levels survive
    logger.info("Adding FastAPI integration to existing Sentry configuration")
    integrations.append(FastApiIntegration())
    sentry_sdk.init(
        dsn=current_options.get("dsn"),
        integrations=integrations,
        environment=current_options.get("environment", settings.ENVIRONMENT),
        traces_sample_rate=current_options.get("traces_sample_rate", 1.0),
    )


_setup_sentry_fastapi()


def custom_generate_unique_id(route: APIRoute) -> str:
    # Handle routes without tags
    if route.tags and len(route.tags) > 0:
        return f"{route.tags[0]}-{route.name}"
    else:
        return route.name or "unnamed_route"


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    # Standard library imports
    from contextlib import asynccontextmanager

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        logger.info("Starting up resident registry")

        try:
            await get_store().ping()
            logger.info(f"Connected to Redis at {settings.REDIS_URL}")
        except StoreUnavailable as e:
            logger.error(f"Redis is not reachable at startup: {e}")

        yield

        logger.info("Shutting down resident registry")
        await redis_client.aclose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Resident registry with maintained population and voter counters",
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.ENVIRONMENT != "production" else None,
        docs_url=f"{settings.API_V1_STR}/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url=f"{settings.API_V1_STR}/redoc" if settings.ENVIRONMENT != "production" else None,
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health_check():
        try:
            await get_store().ping()
        except StoreUnavailable as e:
            return {"status": "degraded", "version": "1.0.0", "redis": "unreachable", "error": e.reason}
        return {"status": "healthy", "version": "1.0.0", "redis": "connected"}

    # Local application imports
    from registry.api import router as api_router
    from registry.api.internal.utils.exceptions import register_exception_handlers

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


# Create the app instance
app = create_app()
