"""Cosine similarity and exhaustive top-k ranking.

Every query is compared against every document in the corpus. There is no index:
ranking cost is O(n * D) for n documents of dimension D.
"""

import asyncio
import heapq
import math
from typing import Optional, Sequence

from loguru import logger

from basic_retrieval.errors import DimensionMismatchError
from basic_retrieval.schemas import Document, RankedResult

DEFAULT_PARALLEL_THRESHOLD = 2000


def compute_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors of equal length.

    Returns exactly 0.0 when either vector has zero magnitude or holds a
    non-finite component. The result is clamped to [-1.0, 1.0] to absorb
    floating point overshoot.

    Raises:
        DimensionMismatchError: If the vectors have different lengths
    """
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))

    scaled_a = _scale_to_unit_peak(a)
    scaled_b = _scale_to_unit_peak(b)
    if scaled_a is None or scaled_b is None:
        return 0.0

    dot = 0.0
    magnitude_a = 0.0
    magnitude_b = 0.0
    for x, y in zip(scaled_a, scaled_b):
        dot += x * y
        magnitude_a += x * x
        magnitude_b += y * y

    score = dot / (math.sqrt(magnitude_a) * math.sqrt(magnitude_b))
    if not math.isfinite(score):
        return 0.0
    return max(-1.0, min(1.0, score))


def _scale_to_unit_peak(vector: Sequence[float]) -> Optional[list[float]]:
    """Divide by the largest absolute component, or None for zero/non-finite vectors.

    Cosine similarity is scale invariant, and a peak of 1.0 keeps the sums of
    squares away from both overflow and underflow.
    """
    peak = 0.0
    for value in vector:
        if not math.isfinite(value):
            return None
        peak = max(peak, abs(value))
    if peak == 0.0:
        return None
    return [value / peak for value in vector]


class SimilarityRanker:
    """Ranks documents by cosine similarity to a query vector."""

    def __init__(self, parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD):
        self.parallel_threshold = parallel_threshold

    @staticmethod
    def score(query_vector: Sequence[float], document: Document) -> float:
        """Similarity of one document to the query; 0.0 when it has no embedding."""
        if document.embedding is None:
            return 0.0
        return compute_similarity(query_vector, document.embedding)

    def rank_scored(
        self, query_vector: Sequence[float], documents: Sequence[Document], k: int
    ) -> list[RankedResult]:
        """Top-k documents with their scores, best first.

        Equal scores keep the order the documents were given in.
        """
        if k <= 0 or not documents:
            return []

        scores = [self.score(query_vector, document) for document in documents]
        # nlargest is equivalent to sorted(..., reverse=True)[:k], which is stable
        top = heapq.nlargest(k, range(len(documents)), key=scores.__getitem__)
        return [RankedResult(document=documents[i], score=scores[i]) for i in top]

    def rank(
        self, query_vector: Sequence[float], documents: Sequence[Document], k: int
    ) -> list[Document]:
        """Top-k documents, best first."""
        return [result.document for result in self.rank_scored(query_vector, documents, k)]

    async def arank_scored(
        self, query_vector: Sequence[float], documents: Sequence[Document], k: int
    ) -> list[RankedResult]:
        """Async rank_scored; large corpora are ranked on a worker thread."""
        if len(documents) >= self.parallel_threshold and k > 0:
            logger.debug(f"Ranking {len(documents)} documents on a worker thread")
            return await asyncio.to_thread(self.rank_scored, query_vector, documents, k)
        return self.rank_scored(query_vector, documents, k)

    async def arank(
        self, query_vector: Sequence[float], documents: Sequence[Document], k: int
    ) -> list[Document]:
        results = await self.arank_scored(query_vector, documents, k)
        return [result.document for result in results]
