"""Configuration utilities for gateway services."""

from .config_enums import Environment
from .service_base import GatewayServiceSettings

__all__ = ["Environment", "GatewayServiceSettings"]
