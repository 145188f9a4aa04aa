"""versecue error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Corpus
- 4xxx: Embedding provider

Blank queries, unresolvable candidates and exhausted rankings are not errors;
the engine returns fewer (or zero) suggestions for those.
"""

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Corpus (3xxx)
    CORPUS_FILE_NOT_FOUND = 3001
    CORPUS_INVALID = 3002
    CORPUS_DUPLICATE_ID = 3003
    CORPUS_EMBEDDINGS_MISALIGNED = 3004

    # Embedding provider (4xxx)
    PROVIDER_UNAVAILABLE = 4001
    MODEL_UNAVAILABLE = 4002


@dataclass(frozen=True, slots=True)
class VerseCueError(Exception):
    """Base error with structured context for CLI and API callers."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'MODEL_UNAVAILABLE')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(VerseCueError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class CorpusError(VerseCueError):
    """Corpus and precomputed-embedding loading errors."""

    @classmethod
    def file_not_found(cls, path: str) -> "CorpusError":
        return cls(
            code=ErrorCode.CORPUS_FILE_NOT_FOUND,
            message=f"Corpus file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def invalid(cls, path: str, reason: str) -> "CorpusError":
        return cls(
            code=ErrorCode.CORPUS_INVALID,
            message=f"Invalid corpus data in {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def duplicate_id(cls, unit_id: str) -> "CorpusError":
        return cls(
            code=ErrorCode.CORPUS_DUPLICATE_ID,
            message=f"Duplicate unit id in corpus: {unit_id}",
            details={"id": unit_id},
        )

    @classmethod
    def misaligned_embeddings(cls, reason: str, **details: Any) -> "CorpusError":
        return cls(
            code=ErrorCode.CORPUS_EMBEDDINGS_MISALIGNED,
            message=f"Precomputed embeddings do not match corpus: {reason}",
            details=details,
        )


NETWORK_HINT = (
    "Model could not be fetched. Check network access to the Hugging Face CDN (huggingface.co)."
)
GENERIC_HINT = "Failed to load embedding model."

# Markers of a download that returned an HTML error page (or nothing) where JSON was expected.
_NETWORK_MARKERS = (
    "unexpected token <",
    "<!doctype",
    "<html",
    "json",
    "expecting value",
    "huggingface.co",
    "connection",
    "timed out",
    "offline",
)


def looks_like_network_failure(exc: BaseException) -> bool:
    """Return True when a model-load failure looks like a network/CDN fetch problem."""
    if isinstance(exc, (ConnectionError, TimeoutError, json.JSONDecodeError)):
        return True
    msg = str(exc).lower()
    return any(marker in msg for marker in _NETWORK_MARKERS)


class ProviderUnavailable(VerseCueError):
    """The embedding provider failed while serving a request.

    Propagated to the caller verbatim; the caller decides whether to retry
    the whole query.
    """

    @classmethod
    def embed_failed(cls, reason: str, **details: Any) -> "ProviderUnavailable":
        return cls(
            code=ErrorCode.PROVIDER_UNAVAILABLE,
            message=f"Embedding provider failed: {reason}",
            retryable=True,
            details=details,
        )


class ModelUnavailable(ProviderUnavailable):
    """The embedding model could not be initialized."""

    @property
    def hint(self) -> str:
        return str(self.details.get("hint", GENERIC_HINT))

    @property
    def network(self) -> bool:
        return bool(self.details.get("network", False))

    @classmethod
    def from_exception(cls, model: str, exc: BaseException) -> "ModelUnavailable":
        network = looks_like_network_failure(exc)
        hint = NETWORK_HINT if network else GENERIC_HINT
        return cls(
            code=ErrorCode.MODEL_UNAVAILABLE,
            message=f"{hint}\nOriginal error: {exc}",
            retryable=True,
            details={"model": model, "hint": hint, "network": network, "reason": str(exc)},
        )
