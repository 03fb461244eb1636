from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI

from gateway_service_libs.error_handling.fastapi import (
    register_error_handlers as register_fastapi_error_handlers,
)
from gateway_service_libs.logging_utils import configure_service_logging, create_service_logger
from services.session_gateway_service.app.middleware import (
    CORSGateMiddleware,
    CorrelationIDMiddleware,
    SessionValidationMiddleware,
)
from services.session_gateway_service.app.startup_setup import (
    create_di_container,
    setup_dependency_injection,
)
from services.session_gateway_service.config import Settings
from services.session_gateway_service.routers import file_routes, session_routes
from services.session_gateway_service.routers.health_routes import router as health_router

logger = create_service_logger("session_gateway_service.main")


def create_app(
    container: AsyncContainer | None = None, config: Settings | None = None
) -> FastAPI:
    """Build the gateway app.

    Components, middlewares included, take their Settings from the dishka
    container. ``config`` only drives logging and the FastAPI metadata, and
    seeds the container when none is given. Tests pass their own container.
    """
    if config is None:
        config = Settings()

    configure_service_logging(
        config.SERVICE_NAME,
        environment=config.ENVIRONMENT.value,
        log_level=config.LOG_LEVEL,
    )

    if container is None:
        container = create_di_container(config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("Session Gateway Service starting", port=config.HTTP_PORT)
        yield
        await container.close()
        logger.info("Session Gateway Service shutdown completed")

    # Interactive docs are not served in production
    docs_enabled = not config.is_production()

    app = FastAPI(
        title=config.SERVICE_NAME,
        version="1.0.0",
        description=(
            "Session Gateway - validates sessions against the identity service and "
            "proxies file operations to the file storage service"
        ),
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    # Register error handlers
    register_fastapi_error_handlers(app)

    # Last added runs first: CORS -> CorrelationID -> SessionValidation -> routes
    app.add_middleware(SessionValidationMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(CORSGateMiddleware)

    # Include routers
    app.include_router(health_router, tags=["Health"])
    app.include_router(file_routes.router, prefix="/v1", tags=["Files"])
    app.include_router(session_routes.router, prefix="/v1", tags=["Session"])

    # Setup Dishka DI
    setup_dependency_injection(app, container)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    server_config = Settings()
    uvicorn.run(app, host=server_config.HTTP_HOST, port=server_config.HTTP_PORT)
