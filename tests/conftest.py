"""Common test fixtures.

Unit tests run against an in-memory SQLite database and a deterministic keyword
embedding provider, so no model download or network access is needed.
"""

import re
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from basic_retrieval.config import ConfigManager, RetrievalConfig
from basic_retrieval.db import DatabaseType, engine_session_factory
from basic_retrieval.repository.document_repository import DocumentRepository
from basic_retrieval.repository.embedding_provider import l2_normalize
from basic_retrieval.repository.embedding_provider_factory import reset_embedding_provider
from basic_retrieval.schemas import Document
from basic_retrieval.services.ingestion_service import IngestionService
from basic_retrieval.services.loaders import SAMPLE_DOCUMENTS
from basic_retrieval.services.retrieval_service import RetrievalService, create_retrieval_service

# Axis 0: football, 1: tennis, 2: olympics, 3: constant bias
TOPIC_KEYWORDS = {
    0: {"football", "soccer", "messi", "copa", "america", "goal"},
    1: {"tennis", "serena", "williams", "wimbledon", "retirement"},
    2: {"olympics", "olympic", "breakdancing", "summer"},
}
STUB_DIMENSIONS = 4


def keyword_vector(text: str) -> list[float]:
    """Unit vector counting topic keywords in the text."""
    vector = [0.0] * STUB_DIMENSIONS
    for word in re.findall(r"[a-z]+", text.lower()):
        for axis, keywords in TOPIC_KEYWORDS.items():
            if word in keywords:
                vector[axis] += 1.0
    vector[3] = 0.1
    return l2_normalize(vector)


class KeywordEmbeddingProvider:
    """Deterministic stub provider that embeds text by topic keywords."""

    model_name = "keyword-stub"
    dimensions = STUB_DIMENSIONS

    def __init__(self):
        self.embed_calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        return keyword_vector(text)

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [keyword_vector(text) for text in texts]


@pytest.fixture(autouse=True)
def reset_process_state():
    """Each test starts without a cached config or embedding provider."""
    ConfigManager.reset()
    reset_embedding_provider()
    yield
    ConfigManager.reset()
    reset_embedding_provider()


@pytest.fixture
def app_config(tmp_path) -> RetrievalConfig:
    """Test configuration rooted in a temp directory."""
    return RetrievalConfig(
        env="test",
        home=tmp_path,
        collection_id="test-collection",
        embedding_dimensions=STUB_DIMENSIONS,
    )


@pytest.fixture
def keyword_embedder() -> Callable[[str], list[float]]:
    return keyword_vector


@pytest.fixture
def embedding_provider() -> KeywordEmbeddingProvider:
    return KeywordEmbeddingProvider()


@pytest_asyncio.fixture
async def engine_factory(
    tmp_path,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """Fresh in-memory database with tables created."""
    async with engine_session_factory(tmp_path / "test.db", DatabaseType.MEMORY) as (
        engine,
        session_maker,
    ):
        yield engine, session_maker


@pytest_asyncio.fixture
async def session_maker(engine_factory) -> async_sessionmaker[AsyncSession]:
    _, session_maker = engine_factory
    return session_maker


@pytest_asyncio.fixture
async def document_repository(session_maker) -> DocumentRepository:
    return DocumentRepository(session_maker)


@pytest.fixture
def ingestion_service(embedding_provider, document_repository, app_config) -> IngestionService:
    return IngestionService(
        embedding_provider,
        document_repository,
        collection_id=app_config.collection_id,
    )


@pytest.fixture
def retrieval_service(embedding_provider, document_repository, app_config) -> RetrievalService:
    return create_retrieval_service(embedding_provider, document_repository, app_config)


@pytest_asyncio.fixture
async def sports_corpus(ingestion_service, document_repository, app_config) -> list[Document]:
    """The sample corpus: Olympics, Copa America and tennis documents, in that order."""
    await ingestion_service.ingest(SAMPLE_DOCUMENTS)
    return await document_repository.fetch_all(app_config.collection_id)
