"""
Gateway Service Libraries Package.

Shared infrastructure for gateway services: structured logging, the
structured error framework and the settings base class.
"""

from .logging_utils import configure_service_logging, create_service_logger

__all__ = ["configure_service_logging", "create_service_logger"]
