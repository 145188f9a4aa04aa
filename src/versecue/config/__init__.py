"""Config module exports."""

from versecue.config.loader import VerseCueSettings, load_config
from versecue.config.models import (
    EmbeddingConfig,
    LoggingConfig,
    RetrievalConfig,
    VerseCueConfig,
)

__all__ = [
    "load_config",
    "EmbeddingConfig",
    "LoggingConfig",
    "RetrievalConfig",
    "VerseCueConfig",
    "VerseCueSettings",
]
