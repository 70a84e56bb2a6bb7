"""Retrieval service: embed the query, fetch the corpus, rank, return top-k.

Each call runs as one unit. Any failure aborts the whole call and is raised as a
RetrievalFailedError carrying the specific error; nothing is retried and no
partial ranking is ever returned.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from loguru import logger

from basic_retrieval.config import ConfigManager, RetrievalConfig
from basic_retrieval.errors import (
    DeadlineExceededError,
    InvalidQueryError,
    ModelUnavailableError,
    RetrievalError,
    RetrievalFailedError,
    StoreUnavailableError,
)
from basic_retrieval.repository.document_store import DocumentStore
from basic_retrieval.repository.embedding_provider import EmbeddingProvider
from basic_retrieval.schemas import Document, RankedResult
from basic_retrieval.services.similarity import SimilarityRanker


class RetrievalStage(str, Enum):
    """Stages a retrieval call moves through, in order."""

    VALIDATING = "validating"
    EMBEDDING = "embedding"
    FETCHING = "fetching"
    RANKING = "ranking"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class _RetrievalRun:
    """Tracks the stage of one in-flight call."""

    stage: RetrievalStage = RetrievalStage.VALIDATING

    def advance(self, stage: RetrievalStage) -> None:
        self.stage = stage
        logger.debug(f"Retrieval stage: {stage.value}")


def validate_query(query_text: str) -> str:
    """Return the query if it has non-whitespace content.

    Raises:
        InvalidQueryError: If the query is not a string or is blank
    """
    if not isinstance(query_text, str) or not query_text.strip():
        raise InvalidQueryError("Query text must be a non-empty string")
    return query_text


def _collaborator_timeout(
    stage: RetrievalStage, exc: BaseException
) -> Optional[RetrievalError]:
    """Map a timeout raised inside the embedding model or the store to its stage error."""
    if stage == RetrievalStage.EMBEDDING:
        return ModelUnavailableError(f"Embedding model timed out: {exc}")
    if stage == RetrievalStage.FETCHING:
        return StoreUnavailableError(f"Document store timed out: {exc}")
    return None


class RetrievalService:
    """Selects the documents most relevant to a query.

    Collaborators are passed in, so tests can substitute stub providers and stores
    without touching the ranker.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        document_store: DocumentStore,
        ranker: Optional[SimilarityRanker] = None,
        *,
        collection_id: str = "documents",
        default_top_k: int = 3,
        timeout: Optional[float] = None,
    ):
        self.embedding_provider = embedding_provider
        self.document_store = document_store
        self.ranker = ranker or SimilarityRanker()
        self.collection_id = collection_id
        self.default_top_k = default_top_k
        self.timeout = timeout

    async def retrieve(
        self,
        query_text: str,
        k: Optional[int] = None,
        *,
        timeout: Optional[float] = None,
    ) -> list[Document]:
        """
        Retrieve the documents most similar to the query.

        Args:
            query_text: Raw query text
            k: Number of documents to return, defaults to default_top_k
            timeout: Deadline in seconds for the whole call, defaults to the service timeout

        Returns:
            Documents ordered from most to least similar

        Raises:
            RetrievalFailedError: Wrapping the specific failure as ``cause``
        """
        results = await self.retrieve_scored(query_text, k, timeout=timeout)
        return [result.document for result in results]

    async def retrieve_scored(
        self,
        query_text: str,
        k: Optional[int] = None,
        *,
        timeout: Optional[float] = None,
    ) -> list[RankedResult]:
        """Same as retrieve, keeping the similarity score of each document."""
        top_k = self.default_top_k if k is None else k
        deadline = timeout if timeout is not None else self.timeout
        run = _RetrievalRun()
        started = time.perf_counter()

        try:
            if deadline is None:
                results = await self._run_pipeline(run, query_text, top_k)
            else:
                results = await asyncio.wait_for(
                    self._run_pipeline(run, query_text, top_k), timeout=deadline
                )
        except RetrievalError as exc:
            raise self._failed(run, exc) from exc
        except asyncio.TimeoutError as exc:
            if deadline is None:
                # Raised by a collaborator, not by the call deadline
                cause = _collaborator_timeout(run.stage, exc)
                if cause is None:
                    raise
                raise self._failed(run, cause) from exc
            expired = DeadlineExceededError(
                f"Retrieval did not finish within {deadline}s (stage: {run.stage.value})"
            )
            expired.__cause__ = exc
            raise self._failed(run, expired) from expired

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Retrieved {len(results)} documents (k={top_k}) from "
            f"collection '{self.collection_id}' in {elapsed_ms:.1f}ms"
        )
        return results

    async def _run_pipeline(
        self, run: _RetrievalRun, query_text: str, k: int
    ) -> list[RankedResult]:
        run.advance(RetrievalStage.VALIDATING)
        validate_query(query_text)

        run.advance(RetrievalStage.EMBEDDING)
        query_vector = await self.embedding_provider.embed(query_text)

        run.advance(RetrievalStage.FETCHING)
        corpus = await self.document_store.fetch_all(self.collection_id)

        run.advance(RetrievalStage.RANKING)
        results = await self.ranker.arank_scored(query_vector, corpus, k)

        run.advance(RetrievalStage.COMPLETE)
        return results

    def _failed(self, run: _RetrievalRun, cause: RetrievalError) -> RetrievalFailedError:
        stage = run.stage
        run.stage = RetrievalStage.FAILED
        if isinstance(cause, InvalidQueryError):
            logger.warning(f"Rejected retrieval query: {cause}")
        else:
            logger.error(
                f"Retrieval failed while {stage.value}: {type(cause).__name__}: {cause}"
            )
        return RetrievalFailedError(stage.value, cause)


def create_retrieval_service(
    embedding_provider: EmbeddingProvider,
    document_store: DocumentStore,
    app_config: Optional[RetrievalConfig] = None,
) -> RetrievalService:
    """Build a RetrievalService from config."""
    config = app_config or ConfigManager().config
    return RetrievalService(
        embedding_provider,
        document_store,
        SimilarityRanker(parallel_threshold=config.parallel_threshold),
        collection_id=config.collection_id,
        default_top_k=config.default_top_k,
        timeout=config.retrieval_timeout,
    )
