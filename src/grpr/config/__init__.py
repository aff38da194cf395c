"""
Configuration module for grpr.

Exports the main components for convenient imports.
"""

from .loader import load_config
from .schema import (
    AppConfig,
    DiscoveryConfig,
    LoggingConfig,
    ReportConfig,
    ToolConfig,
)

__all__ = [
    "load_config",
    "AppConfig",
    "DiscoveryConfig",
    "LoggingConfig",
    "ReportConfig",
    "ToolConfig",
]
