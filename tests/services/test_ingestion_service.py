"""Tests for ingestion of documents into the store."""

import pytest

from basic_retrieval.errors import ModelUnavailableError
from basic_retrieval.schemas import Document, DocumentCreate
from basic_retrieval.services.ingestion_service import IngestionService
from basic_retrieval.services.loaders import SAMPLE_DOCUMENTS


class _RecordingStore:
    def __init__(self):
        self.batches: list[tuple[str, list[Document]]] = []

    async def fetch_all(self, collection_id):  # pragma: no cover
        return [doc for _, batch in self.batches for doc in batch]

    async def insert(self, collection_id, document):  # pragma: no cover
        self.batches.append((collection_id, [document]))
        return document

    async def insert_many(self, collection_id, documents):
        self.batches.append((collection_id, list(documents)))
        return list(documents)


class _ShortProvider:
    model_name = "short"
    dimensions = 4

    async def embed(self, text):  # pragma: no cover
        return [1.0, 0.0, 0.0, 0.0]

    async def embed_documents(self, texts):
        return [[1.0, 0.0, 0.0, 0.0]]


@pytest.mark.asyncio
async def test_ingest_embeds_and_stores_documents(
    ingestion_service, document_repository, app_config, keyword_embedder
):
    stored = await ingestion_service.ingest(SAMPLE_DOCUMENTS)

    assert stored == len(SAMPLE_DOCUMENTS)
    documents = await document_repository.fetch_all(app_config.collection_id)
    assert [doc.text for doc in documents] == [doc.text for doc in SAMPLE_DOCUMENTS]
    for document in documents:
        assert document.embedding == pytest.approx(tuple(keyword_embedder(document.text)))


@pytest.mark.asyncio
async def test_ingest_into_explicit_collection(ingestion_service, document_repository, app_config):
    await ingestion_service.ingest(SAMPLE_DOCUMENTS[:1], collection_id="olympics")

    assert await document_repository.count("olympics") == 1
    assert await document_repository.count(app_config.collection_id) == 0


@pytest.mark.asyncio
async def test_ingest_nothing(ingestion_service):
    assert await ingestion_service.ingest([]) == 0


@pytest.mark.asyncio
async def test_ingest_writes_in_chunks(embedding_provider):
    store = _RecordingStore()
    service = IngestionService(embedding_provider, store, collection_id="sports", chunk_size=2)
    documents = (DocumentCreate(text=f"goal number {i}") for i in range(5))

    stored = await service.ingest(documents)

    assert stored == 5
    assert [len(batch) for _, batch in store.batches] == [2, 2, 1]
    assert {collection for collection, _ in store.batches} == {"sports"}
    texts = [doc.text for _, batch in store.batches for doc in batch]
    assert texts == [f"goal number {i}" for i in range(5)]


@pytest.mark.asyncio
async def test_embed_rejects_missing_vectors():
    service = IngestionService(_ShortProvider(), _RecordingStore())

    with pytest.raises(ModelUnavailableError):
        await service.ingest(SAMPLE_DOCUMENTS)


@pytest.mark.asyncio
async def test_embed_keeps_metadata(ingestion_service):
    documents = await ingestion_service.embed(
        [DocumentCreate(text="Copa America final", metadata={"year": 2024, "final": True})]
    )

    assert documents[0].metadata == {"year": 2024, "final": True}
    assert documents[0].has_embedding
