"""
Codexbar Core Package - Usage reporting for AI coding assistants.

This package provides:
- Configuration and structured logging
- The normalized usage model
- Credential stores and OAuth token refresh
- Per-provider usage clients
- Concurrent aggregation into one report
"""

from .aggregator import UsageAggregator, unknown_failure
from .config import Settings, get_settings, reload_settings
from .exceptions import (
    CodexBarError,
    NoCredentialsError,
    NoUsageDataError,
    TokenRefreshError,
    TransportError,
    UsageAPIError,
)
from .logging import configure_logging, get_logger
from .models import (
    AccountInfo,
    CostInfo,
    FocusedWindow,
    ProviderUsage,
    UsageReport,
    UsageWindow,
)
from .usage_clients import USAGE_CLIENTS, BaseUsageClient

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Config
    "Settings",
    "get_settings",
    "reload_settings",
    # Logging
    "configure_logging",
    "get_logger",
    # Exceptions
    "CodexBarError",
    "NoCredentialsError",
    "TokenRefreshError",
    "UsageAPIError",
    "TransportError",
    "NoUsageDataError",
    # Models
    "AccountInfo",
    "CostInfo",
    "FocusedWindow",
    "ProviderUsage",
    "UsageReport",
    "UsageWindow",
    # Clients
    "BaseUsageClient",
    "USAGE_CLIENTS",
    "UsageAggregator",
    "unknown_failure",
]
