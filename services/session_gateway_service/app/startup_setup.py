"""Startup setup for Session Gateway Service."""

from __future__ import annotations

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.app.auth_provider import RequestContextProvider
from services.session_gateway_service.app.di import GatewayProvider
from services.session_gateway_service.config import Settings

logger = create_service_logger("session_gateway_service.startup")


def create_di_container(config: Settings) -> AsyncContainer:
    """Create the DI container around an explicit Settings value."""
    try:
        logger.info("Creating DI container...")
        container = make_async_container(
            GatewayProvider(config),
            RequestContextProvider(),
            FastapiProvider(),  # Provides Request object to context
        )
        logger.info("DI container created successfully")
        return container
    except Exception as e:
        logger.critical(f"Failed to create DI container: {e}", exc_info=True)
        raise


def setup_dependency_injection(app: FastAPI, container: AsyncContainer) -> None:
    """Setup Dishka integration with FastAPI."""
    try:
        logger.info("Setting up dependency injection...")
        setup_dishka(container, app)
        logger.info("Dependency injection setup completed")
    except Exception as e:
        logger.critical(f"Failed to setup dependency injection: {e}", exc_info=True)
        raise
