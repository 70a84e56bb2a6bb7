"""Composition root for the CLI and for library callers.

This module owns:
- Reading ConfigManager + environment variables
- Initializing logging
- Providing factories for the store, the embedding provider and the services
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from basic_retrieval import db
from basic_retrieval.config import ConfigManager, RetrievalConfig
from basic_retrieval.repository.document_repository import DocumentRepository
from basic_retrieval.repository.embedding_provider import EmbeddingProvider
from basic_retrieval.repository.embedding_provider_factory import get_embedding_provider
from basic_retrieval.services.ingestion_service import IngestionService
from basic_retrieval.services.retrieval_service import (
    RetrievalService,
    create_retrieval_service,
)
from basic_retrieval.utils import setup_logging


@dataclass
class RetrievalContainer:
    """Holds the loaded config and builds the objects that depend on it.

    The database engine and the embedding provider are process-wide and cached;
    repositories and services are cheap and built per call.
    """

    config: RetrievalConfig

    @classmethod
    def create(cls, config: Optional[RetrievalConfig] = None) -> "RetrievalContainer":
        """Build container, initializing logging from config."""
        config = config or ConfigManager().config
        setup_logging(env=config.env, log_level=config.log_level, log_file=config.log_path)
        logger.debug(f"Using database at {config.database_path}")
        return cls(config=config)

    async def document_repository(self) -> DocumentRepository:
        _, session_maker = await db.get_or_create_db(
            db_path=self.config.database_path,
            db_type=db.DatabaseType.FILESYSTEM,
        )
        return DocumentRepository(session_maker)

    def embedding_provider(self) -> EmbeddingProvider:
        return get_embedding_provider(self.config)

    async def retrieval_service(self) -> RetrievalService:
        return create_retrieval_service(
            self.embedding_provider(),
            await self.document_repository(),
            self.config,
        )

    async def ingestion_service(self) -> IngestionService:
        return IngestionService(
            self.embedding_provider(),
            await self.document_repository(),
            collection_id=self.config.collection_id,
        )
