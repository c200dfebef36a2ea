"""Shared utilities for configuration, logging, and error handling"""

from vss_reconcile.utils.config_loader import (
    ConfigLoader,
    ConfigurationError,
    UnsupportedPlatformError,
    validate_repository,
)
from vss_reconcile.utils.logging_config import configure_logging, get_logger

__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "validate_repository",
    "configure_logging",
    "get_logger",
]
