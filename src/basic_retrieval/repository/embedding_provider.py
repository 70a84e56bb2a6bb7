"""Embedding provider protocol for pluggable embedding backends."""

import math
from typing import Protocol, Sequence


class EmbeddingProvider(Protocol):
    """Contract for embedding providers.

    Implementations return unit-length vectors of exactly ``dimensions`` floats,
    so similarity between two embeddings reduces to a dot product.
    """

    model_name: str
    dimensions: int

    async def embed(self, text: str) -> list[float]:
        """Embed a single query string."""
        ...

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of document texts."""
        ...


def l2_normalize(vector: Sequence[float]) -> list[float]:
    """Scale a vector to unit length. A zero vector is returned unchanged."""
    values = [float(value) for value in vector]
    norm = math.sqrt(sum(value * value for value in values))
    if norm == 0.0:
        return values
    return [value / norm for value in values]
