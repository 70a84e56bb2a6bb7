"""OpenAI-based embedding provider for API-backed embeddings."""

from __future__ import annotations

import os
import threading
from typing import Any

from loguru import logger

from basic_retrieval.errors import (
    DimensionMismatchError,
    InvalidQueryError,
    ModelUnavailableError,
)
from basic_retrieval.repository.embedding_provider import EmbeddingProvider, l2_normalize


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embedding provider backed by OpenAI's embeddings API."""

    def __init__(
        self,
        model_name: str = "text-embedding-3-small",
        *,
        batch_size: int = 64,
        dimensions: int = 1536,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.model_name = model_name
        self.dimensions = dimensions
        self.batch_size = batch_size
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._client: Any | None = None
        self._client_lock = threading.Lock()

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        with self._client_lock:
            if self._client is not None:
                return self._client

            try:
                from openai import AsyncOpenAI
            except ImportError as exc:  # pragma: no cover - covered via monkeypatch tests
                raise ModelUnavailableError(
                    "OpenAI dependency is missing. Reinstall basic-retrieval: pip install basic-retrieval"
                ) from exc

            api_key = self._api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ModelUnavailableError("OpenAI embedding provider requires OPENAI_API_KEY.")

            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self._base_url,
                timeout=self._timeout,
            )
            logger.debug(f"Created OpenAI client for model {self.model_name}")
            return self._client

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        client = self._get_client()
        all_vectors: list[list[float]] = []

        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            try:
                response = await client.embeddings.create(
                    model=self.model_name,
                    input=batch,
                )
            except Exception as exc:
                logger.error(f"OpenAI embeddings request failed: {exc}")
                raise ModelUnavailableError(f"OpenAI embeddings request failed: {exc}") from exc

            vectors_by_index: dict[int, list[float]] = {
                int(item.index): l2_normalize(item.embedding) for item in response.data
            }
            for index in range(len(batch)):
                vector = vectors_by_index.get(index)
                if vector is None:
                    raise ModelUnavailableError(
                        "OpenAI embedding response is missing expected vector index."
                    )
                all_vectors.append(vector)

        for vector in all_vectors:
            if len(vector) != self.dimensions:
                raise DimensionMismatchError(
                    self.dimensions,
                    len(vector),
                    f"Embedding model returned {len(vector)}-dimensional vectors "
                    f"but provider was configured for {self.dimensions} dimensions.",
                )
        return all_vectors

    async def embed(self, text: str) -> list[float]:
        if not text:
            raise InvalidQueryError("Cannot embed empty text")
        vectors = await self.embed_documents([text])
        return vectors[0]
