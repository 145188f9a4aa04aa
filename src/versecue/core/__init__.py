"""Core module exports."""

from versecue.core.errors import (
    ConfigError,
    CorpusError,
    ErrorCode,
    ModelUnavailable,
    ProviderUnavailable,
    VerseCueError,
)
from versecue.core.logging import (
    clear_query_id,
    configure_logging,
    get_logger,
    get_query_id,
    set_query_id,
)
from versecue.core.progress import progress_bar, status

__all__ = [
    # Errors
    "ConfigError",
    "CorpusError",
    "ErrorCode",
    "ModelUnavailable",
    "ProviderUnavailable",
    "VerseCueError",
    # Logging
    "clear_query_id",
    "configure_logging",
    "get_logger",
    "get_query_id",
    "set_query_id",
    # Progress
    "progress_bar",
    "status",
]
