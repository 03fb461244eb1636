"""Base settings class shared by gateway services."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from gateway_service_libs.config.config_enums import Environment


class GatewayServiceSettings(BaseSettings):
    """Common settings every gateway service carries."""

    SERVICE_NAME: str = "gateway-service"
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",
        description="Runtime environment for the service",
    )
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    def is_production(self) -> bool:
        return self.ENVIRONMENT is Environment.PRODUCTION
