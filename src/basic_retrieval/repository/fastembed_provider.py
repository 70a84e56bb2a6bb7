"""FastEmbed-based local embedding provider."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING

from loguru import logger

from basic_retrieval.errors import (
    DimensionMismatchError,
    InvalidQueryError,
    ModelUnavailableError,
)
from basic_retrieval.repository.embedding_provider import EmbeddingProvider, l2_normalize

if TYPE_CHECKING:
    from fastembed import TextEmbedding  # type: ignore[import-not-found]  # pragma: no cover

_REGISTRATION_LOCK = threading.Lock()


class FastEmbedEmbeddingProvider(EmbeddingProvider):
    """Local ONNX embedding provider backed by FastEmbed.

    The model is loaded on first use. Loading runs on a worker thread under a
    lock, so concurrent first calls share a single load and callers arriving
    while it is in flight wait for it to finish.
    """

    # Models FastEmbed does not ship, registered from their Hugging Face ONNX export
    _CUSTOM_MODELS = {
        "sentence-transformers/all-mpnet-base-v2": {
            "dim": 768,
            "model_file": "onnx/model.onnx",
            "normalization": True,
        },
    }

    _MODEL_ALIASES = {
        "all-mpnet-base-v2": "sentence-transformers/all-mpnet-base-v2",
        "all-minilm-l6-v2": "sentence-transformers/all-MiniLM-L6-v2",
        "bge-small-en-v1.5": "BAAI/bge-small-en-v1.5",
    }

    def __init__(
        self,
        model_name: str = "all-mpnet-base-v2",
        *,
        batch_size: int = 64,
        dimensions: int = 768,
    ) -> None:
        self.model_name = model_name
        self.dimensions = dimensions
        self.batch_size = batch_size
        self._model: TextEmbedding | None = None
        self._model_lock = threading.Lock()

    @property
    def resolved_model_name(self) -> str:
        return self._MODEL_ALIASES.get(self.model_name.lower(), self.model_name)

    async def _load_model(self) -> "TextEmbedding":
        if self._model is not None:
            return self._model
        return await asyncio.to_thread(self._create_model)

    def _create_model(self) -> "TextEmbedding":
        with self._model_lock:
            if self._model is not None:
                return self._model

            try:
                from fastembed import TextEmbedding  # type: ignore[import-not-found]
            except ImportError as exc:  # pragma: no cover - exercised via tests with monkeypatch
                raise ModelUnavailableError(
                    "fastembed package is missing. "
                    "Reinstall basic-retrieval to include it: pip install -U basic-retrieval"
                ) from exc

            model_name = self.resolved_model_name
            logger.info(f"Loading embedding model: {model_name}")
            try:
                self._register_custom_model(TextEmbedding, model_name)
                model = TextEmbedding(model_name=model_name)
            except Exception as exc:
                logger.error(f"Failed to load embedding model {model_name}: {exc}")
                raise ModelUnavailableError(
                    f"Embedding model '{model_name}' could not be loaded: {exc}"
                ) from exc

            self._model = model
            logger.info(f"Embedding model loaded: {model_name}")
            return model

    @classmethod
    def _register_custom_model(
        cls, text_embedding: type[TextEmbedding], model_name: str
    ) -> None:
        """Register a model FastEmbed does not list itself, once per process."""
        spec = cls._CUSTOM_MODELS.get(model_name)
        if spec is None:
            return

        with _REGISTRATION_LOCK:
            supported = {model["model"] for model in text_embedding.list_supported_models()}
            if model_name in supported:
                return

            from fastembed.common.model_description import (  # type: ignore[import-not-found]
                ModelSource,
                PoolingType,
            )

            text_embedding.add_custom_model(
                model=model_name,
                pooling=PoolingType.MEAN,
                normalization=spec["normalization"],
                sources=ModelSource(hf=model_name),
                dim=spec["dim"],
                model_file=spec["model_file"],
            )
            logger.info(f"Registered custom embedding model: {model_name}")

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        model = await self._load_model()

        def _embed_batch() -> list[list[float]]:
            vectors = list(model.embed(texts, batch_size=self.batch_size))
            normalized: list[list[float]] = []
            for vector in vectors:
                values = vector.tolist() if hasattr(vector, "tolist") else vector
                normalized.append(l2_normalize(values))
            return normalized

        vectors = await asyncio.to_thread(_embed_batch)
        for vector in vectors:
            if len(vector) != self.dimensions:
                raise DimensionMismatchError(
                    self.dimensions,
                    len(vector),
                    f"Embedding model returned {len(vector)}-dimensional vectors "
                    f"but provider was configured for {self.dimensions} dimensions.",
                )
        return vectors

    async def embed(self, text: str) -> list[float]:
        if not text:
            raise InvalidQueryError("Cannot embed empty text")
        vectors = await self.embed_documents([text])
        return vectors[0]
