"""Document store protocol consumed by retrieval and ingestion."""

from typing import Protocol, Sequence

from basic_retrieval.schemas import Document


class DocumentStore(Protocol):
    """Contract for document stores.

    ``fetch_all`` returns a whole collection, unfiltered and unranked, in insertion
    order. Ranking stays out of the store so it can be swapped for one with native
    vector search without touching the ranker or the retrieval service.

    The write operations exist for ingestion only; retrieval never calls them.
    """

    async def fetch_all(self, collection_id: str) -> list[Document]:
        """Return every document in the collection."""
        ...

    async def insert(self, collection_id: str, document: Document) -> Document:
        """Add one document to the collection."""
        ...

    async def insert_many(
        self, collection_id: str, documents: Sequence[Document]
    ) -> list[Document]:
        """Add several documents to the collection in one transaction."""
        ...
