"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (VERSECUE__SECTION__KEY)
3. Local YAML (.versecue/config.yaml)
4. Global YAML (~/.config/versecue/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    VERSECUE__<SECTION>__<KEY>=<VALUE>

Examples:
    VERSECUE__LOGGING__LEVEL=DEBUG
    VERSECUE__EMBEDDING__MODEL_NAME=BAAI/bge-small-en-v1.5
    VERSECUE__RETRIEVAL__TOP_K=3
    VERSECUE__RETRIEVAL__HYSTERESIS_MARGIN=0.08
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        VERSECUE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every query and may be noisy in listen mode.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class EmbeddingConfig(BaseModel):
    """Embedding provider configuration.

    Env vars:
        VERSECUE__EMBEDDING__MODEL_NAME: fastembed model identifier
        VERSECUE__EMBEDDING__THREADS: ONNX runtime threads (default: half the CPUs)
        VERSECUE__EMBEDDING__BATCH_SIZE: Units embedded per corpus batch
        VERSECUE__EMBEDDING__CACHE_DIR: Model download cache directory
    """

    model_name: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="fastembed model. Precomputed embedding caches are only valid "
        "for the model that produced them.",
    )
    threads: int | None = Field(
        default=None,
        description="ONNX runtime threads. None picks half the available CPUs.",
    )
    batch_size: int = Field(
        default=500,
        description="Units embedded per corpus batch. Bounds peak memory during "
        "lazy corpus population.",
    )
    cache_dir: str | None = Field(
        default=None,
        description="Model download cache directory. Default: fastembed's cache.",
    )

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"batch_size must be >= 1, got {v}")
        return v


class RetrievalConfig(BaseModel):
    """Hybrid retrieval and ranking parameters.

    Env vars:
        VERSECUE__RETRIEVAL__TOP_K: Default number of suggestions
        VERSECUE__RETRIEVAL__RRF_K: Reciprocal-rank fusion smoothing constant
        VERSECUE__RETRIEVAL__HYSTERESIS_MARGIN: Score delta needed to replace the top
    """

    top_k: int = Field(default=5, description="Default number of suggestions per query.")
    dense_limit: int = Field(default=50, description="Dense candidates entering fusion.")
    lexical_limit: int = Field(
        default=50, description="Lexical candidates per field entering fusion."
    )
    lexical_match_all: bool = Field(
        default=True,
        description="A lexical hit must match every query token within one field. "
        "False accepts units matching any token.",
    )
    fused_limit: int = Field(default=40, description="Fused candidates entering re-rank.")
    rrf_k: int = Field(default=60, description="RRF smoothing constant.")

    dense_weight: float = Field(default=0.8)
    lexical_weight: float = Field(default=0.15)
    theme_weight: float = Field(default=0.05)
    lexical_boost: float = Field(
        default=0.02, description="Lexical term value when the unit matched lexically."
    )
    theme_boost: float = Field(
        default=0.05, description="Theme term value when unit and query share a theme."
    )

    semantic_threshold: float = Field(
        default=0.6,
        description="Dense similarity above which 'semantic similarity' is listed as a reason.",
    )
    hysteresis_margin: float = Field(
        default=0.05,
        description="A new top must beat the previous top's confidence by at least this "
        "much to replace it. TRADEOFF: higher = steadier display, slower to follow the talk.",
    )
    clamp_confidence: bool = Field(
        default=False,
        description="Clamp reported confidence to [0, 1]. Ranking always uses raw scores.",
    )

    @field_validator("dense_limit", "lexical_limit", "fused_limit", "rrf_k")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"must be >= 0, got {v}")
        return v

    @model_validator(mode="after")
    def validate_top_k(self) -> "RetrievalConfig":
        if self.top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {self.top_k}")
        return self


class VerseCueConfig(BaseModel):
    """Root configuration for versecue.

    All settings can be configured via:
    1. Environment variables: VERSECUE__SECTION__KEY
    2. YAML config files (local or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
