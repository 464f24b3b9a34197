"""Configuration module for neo-uploads."""

from .logging_config import (
    setup_logging,
    get_logger,
    LogLevel,
    LogVerbosity,
    LogFormat,
    LoggingConfig,
)
from .settings import (
    MIB,
    BACKEND_MAX_CHUNK_SIZE,
    StrategyKind,
    UploadStoreSettings,
    AzureBackendSettings,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "LogLevel",
    "LogVerbosity",
    "LogFormat",
    "LoggingConfig",

    # Settings
    "MIB",
    "BACKEND_MAX_CHUNK_SIZE",
    "StrategyKind",
    "UploadStoreSettings",
    "AzureBackendSettings",
]
