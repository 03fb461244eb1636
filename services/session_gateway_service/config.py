"""
Configuration for the Session Gateway Service.

Uses Pydantic settings for environment-based configuration. Downstream
addresses are never hard-coded in components; every component receives this
Settings value through the DI container.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from gateway_service_libs.config import GatewayServiceSettings


def join_url(base: str, suffix: str) -> str:
    """Join a base URL and a path suffix with exactly one slash between them."""
    if not suffix:
        return base
    return f"{base.rstrip('/')}/{suffix.lstrip('/')}"


class Settings(GatewayServiceSettings):
    """Configuration settings for the Session Gateway Service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SESSION_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    SERVICE_NAME: str = "session-gateway-service"

    # HTTP server configuration
    HTTP_HOST: str = Field(default="0.0.0.0", description="HTTP server host")
    HTTP_PORT: int = Field(default=4010, description="HTTP server port")

    # Identity service
    IDENTITY_SERVICE_URL: str = Field(
        default="http://identity_service:8000",
        description="Identity service base URL used for session validation",
        validation_alias=AliasChoices(
            "SESSION_GATEWAY_IDENTITY_SERVICE_URL", "IDENTITY_SERVICE_URL"
        ),
    )
    REQUIRE_CLIENT_TYPE: bool = Field(
        default=True, description="Reject requests without a Client-Type header"
    )
    PUBLIC_PATHS: list[str] = Field(
        default_factory=lambda: ["/", "/healthz", "/metrics"],
        description="Exact request paths that bypass session validation",
    )

    # File storage service
    FILE_STORAGE_URL: str = Field(
        default="http://file_storage_service:8000/",
        description="File storage service base URL",
        validation_alias=AliasChoices(
            "SESSION_GATEWAY_FILE_STORAGE_URL", "FILE_STORAGE_SERVICE_URL"
        ),
    )
    FILE_SAVE_PATH: str = "api/v1/SaveFile"
    IMAGE_SAVE_PATH: str = "api/v1/SaveImages"
    PRIVATE_IMAGE_SAVE_PATH: str = "api/v1/SavePrivateImages"
    FILE_DELETE_PATH: str = "api/v1/deleteFile"
    IMAGES_FROM_URL_PATH: str = "ImagesFromUrl"

    # CORS: comma-separated allow-list, matched exactly against Origin
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Comma-separated list of allowed CORS origins",
    )

    # HTTP client timeouts
    HTTP_CLIENT_TIMEOUT_SECONDS: float = 30.0
    HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS: float = 10.0
    IDENTITY_TIMEOUT_SECONDS: float = Field(
        default=10.0, description="Timeout for a single session validation call"
    )
    STORAGE_TIMEOUT_SECONDS: float = Field(
        default=60.0, description="Timeout for a single file storage call"
    )
    DISCONNECT_POLL_INTERVAL_SECONDS: float = Field(
        default=0.1, description="How often in-flight calls check for client disconnect"
    )

    @property
    def validate_session_url(self) -> str:
        return join_url(self.IDENTITY_SERVICE_URL, "api/v1/ValidateJWT")

    @property
    def file_save_url(self) -> str:
        return join_url(self.FILE_STORAGE_URL, self.FILE_SAVE_PATH)

    @property
    def image_save_url(self) -> str:
        return join_url(self.FILE_STORAGE_URL, self.IMAGE_SAVE_PATH)

    @property
    def private_image_save_url(self) -> str:
        return join_url(self.FILE_STORAGE_URL, self.PRIVATE_IMAGE_SAVE_PATH)

    @property
    def file_delete_url(self) -> str:
        return join_url(self.FILE_STORAGE_URL, self.FILE_DELETE_PATH)

    @property
    def images_from_url_url(self) -> str:
        return join_url(self.FILE_STORAGE_URL, self.IMAGES_FROM_URL_PATH)

