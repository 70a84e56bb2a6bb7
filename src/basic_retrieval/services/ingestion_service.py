"""Ingestion: embed documents in batch and write them to the store.

This is the only code path that writes documents. Embeddings are computed once,
at creation time, with the same provider retrieval uses for queries.
"""

from typing import Iterable, Optional, Sequence

from loguru import logger

from basic_retrieval.errors import ModelUnavailableError
from basic_retrieval.repository.document_store import DocumentStore
from basic_retrieval.repository.embedding_provider import EmbeddingProvider
from basic_retrieval.schemas import Document, DocumentCreate

DEFAULT_INGEST_CHUNK_SIZE = 256


class IngestionService:
    """Turns DocumentCreate inputs into embedded, stored Documents."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        document_store: DocumentStore,
        *,
        collection_id: str = "documents",
        chunk_size: int = DEFAULT_INGEST_CHUNK_SIZE,
    ):
        self.embedding_provider = embedding_provider
        self.document_store = document_store
        self.collection_id = collection_id
        self.chunk_size = chunk_size

    async def embed(self, documents: Sequence[DocumentCreate]) -> list[Document]:
        """Attach embeddings to documents without storing them."""
        if not documents:
            return []

        vectors = await self.embedding_provider.embed_documents([doc.text for doc in documents])
        if len(vectors) != len(documents):
            raise ModelUnavailableError(
                f"Embedding provider returned {len(vectors)} vectors for {len(documents)} texts"
            )

        return [
            Document(text=doc.text, metadata=doc.metadata, embedding=vector)
            for doc, vector in zip(documents, vectors)
        ]

    async def ingest(
        self,
        documents: Iterable[DocumentCreate],
        collection_id: Optional[str] = None,
    ) -> int:
        """
        Embed and store documents, chunk_size at a time.

        Args:
            documents: Documents to ingest, in the order they should be stored
            collection_id: Target collection, defaults to the service collection

        Returns:
            Number of documents stored
        """
        collection = collection_id or self.collection_id
        stored = 0
        chunk: list[DocumentCreate] = []

        for document in documents:
            chunk.append(document)
            if len(chunk) >= self.chunk_size:
                stored += await self._ingest_chunk(collection, chunk)
                chunk = []

        if chunk:
            stored += await self._ingest_chunk(collection, chunk)

        logger.info(f"Ingested {stored} documents into collection '{collection}'")
        return stored

    async def _ingest_chunk(self, collection_id: str, chunk: list[DocumentCreate]) -> int:
        embedded = await self.embed(chunk)
        await self.document_store.insert_many(collection_id, embedded)
        logger.debug(f"Stored chunk of {len(embedded)} documents in '{collection_id}'")
        return len(embedded)
