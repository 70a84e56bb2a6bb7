from basic_retrieval.repository.document_repository import DocumentRepository
from basic_retrieval.repository.document_store import DocumentStore
from basic_retrieval.repository.embedding_provider import EmbeddingProvider

__all__ = [
    "DocumentRepository",
    "DocumentStore",
    "EmbeddingProvider",
]
