"""Configuration management for basic-retrieval.

Settings are read from ``BASIC_RETRIEVAL_*`` environment variables and from a
``.env`` file in the working directory.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR_NAME = ".basic-retrieval"
DATABASE_NAME = "retrieval.db"

Environment = Literal["test", "dev", "user"]


class RetrievalConfig(BaseSettings):
    """Settings for the retrieval pipeline and its collaborators."""

    env: Environment = Field(default="dev", description="Environment name")

    home: Path = Field(
        default_factory=lambda: Path.home() / DATA_DIR_NAME,
        description="Directory holding the document database and log files",
    )

    collection_id: str = Field(
        default="documents",
        description="Collection queried by retrieval and written by ingestion",
        min_length=1,
    )

    embedding_provider: str = Field(
        default="fastembed",
        description="Embedding backend: 'fastembed' (local) or 'openai'",
    )
    embedding_model: str = Field(
        default="all-mpnet-base-v2",
        description="Embedding model name passed to the provider",
    )
    embedding_dimensions: Optional[int] = Field(
        default=None,
        description="Override for the provider's default vector dimensions",
        gt=0,
    )
    embedding_batch_size: int = Field(
        default=64,
        description="Number of texts embedded per model call during ingestion",
        gt=0,
    )
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key for the OpenAI provider (falls back to OPENAI_API_KEY)",
    )

    default_top_k: int = Field(
        default=3, description="Number of documents returned when k is not given", gt=0
    )
    retrieval_timeout: Optional[float] = Field(
        default=None,
        description="Per-call deadline in seconds covering embed, fetch and rank",
        gt=0,
    )
    parallel_threshold: int = Field(
        default=2000,
        description="Corpus size at which ranking moves to a worker thread",
        ge=0,
    )

    log_level: str = Field(default="INFO", description="Log level for loguru sinks")

    model_config = SettingsConfigDict(
        env_prefix="BASIC_RETRIEVAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("embedding_provider")
    @classmethod
    def normalize_provider_name(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def database_path(self) -> Path:
        """Path to the SQLite document database."""
        return self.home / DATABASE_NAME

    @property
    def log_path(self) -> Path:
        return self.home / "basic-retrieval.log"


class ConfigManager:
    """Process-wide access to the loaded configuration."""

    _config: Optional[RetrievalConfig] = None

    @property
    def config(self) -> RetrievalConfig:
        if ConfigManager._config is None:
            ConfigManager._config = RetrievalConfig()
        return ConfigManager._config

    def set_config(self, config: RetrievalConfig) -> None:
        ConfigManager._config = config

    @classmethod
    def reset(cls) -> None:
        """Drop the cached config so the next access reloads it."""
        cls._config = None
