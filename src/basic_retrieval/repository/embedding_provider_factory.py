"""Factory and process-wide handle for the configured embedding provider."""

import threading
from typing import Optional

from loguru import logger

from basic_retrieval.config import ConfigManager, RetrievalConfig
from basic_retrieval.repository.embedding_provider import EmbeddingProvider
from basic_retrieval.repository.fastembed_provider import FastEmbedEmbeddingProvider
from basic_retrieval.repository.openai_provider import OpenAIEmbeddingProvider

_provider: Optional[EmbeddingProvider] = None
_provider_lock = threading.Lock()


def create_embedding_provider(app_config: RetrievalConfig) -> EmbeddingProvider:
    """Create an embedding provider based on config.

    When embedding_dimensions is set in config, it overrides
    the provider's default dimensions (768 for FastEmbed, 1536 for OpenAI).
    """
    provider_name = app_config.embedding_provider.strip().lower()
    extra_kwargs: dict = {}
    if app_config.embedding_dimensions is not None:
        extra_kwargs["dimensions"] = app_config.embedding_dimensions

    if provider_name == "fastembed":
        return FastEmbedEmbeddingProvider(
            model_name=app_config.embedding_model,
            batch_size=app_config.embedding_batch_size,
            **extra_kwargs,
        )

    if provider_name == "openai":
        model_name = app_config.embedding_model or "text-embedding-3-small"
        if model_name in FastEmbedEmbeddingProvider._MODEL_ALIASES:
            model_name = "text-embedding-3-small"
        return OpenAIEmbeddingProvider(
            model_name=model_name,
            batch_size=app_config.embedding_batch_size,
            api_key=app_config.openai_api_key,
            **extra_kwargs,
        )

    raise ValueError(f"Unsupported embedding provider: {provider_name}")


def get_embedding_provider(app_config: Optional[RetrievalConfig] = None) -> EmbeddingProvider:
    """Return the process-wide embedding provider, creating it on first use."""
    global _provider
    if _provider is not None:
        return _provider

    with _provider_lock:
        if _provider is None:
            config = app_config or ConfigManager().config
            _provider = create_embedding_provider(config)
            logger.info(
                f"Embedding provider ready: {config.embedding_provider} "
                f"(model={_provider.model_name}, dimensions={_provider.dimensions})"
            )
    return _provider


def reset_embedding_provider() -> None:
    """Forget the process-wide provider so the next call creates a new one."""
    global _provider
    with _provider_lock:
        _provider = None
