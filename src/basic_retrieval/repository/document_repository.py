"""SQLite-backed document store."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from basic_retrieval import db
from basic_retrieval.errors import StoreUnavailableError
from basic_retrieval.models import DocumentRecord
from basic_retrieval.repository.document_store import DocumentStore
from basic_retrieval.schemas import Document


class DocumentRepository(DocumentStore):
    """Document store backed by a SQLAlchemy async session maker.

    Database and driver errors are raised as StoreUnavailableError so callers see
    one failure type regardless of the backend.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        try:
            async with db.scoped_session(self.session_maker) as session:
                yield session
        except (SQLAlchemyError, OSError) as exc:
            logger.error(f"Document store failed to {action}: {exc}")
            raise StoreUnavailableError(f"Document store failed to {action}: {exc}") from exc

    @staticmethod
    def _to_document(record: DocumentRecord) -> Document:
        return Document(
            text=record.text,
            metadata=record.doc_metadata or {},
            embedding=record.embedding,
        )

    @staticmethod
    def _to_record(collection_id: str, document: Document) -> DocumentRecord:
        return DocumentRecord(
            collection_id=collection_id,
            text=document.text,
            doc_metadata=dict(document.metadata),
            embedding=list(document.embedding) if document.embedding is not None else None,
        )

    async def fetch_all(self, collection_id: str) -> list[Document]:
        """Return every document in the collection, oldest first."""
        query = (
            select(DocumentRecord)
            .where(DocumentRecord.collection_id == collection_id)
            .order_by(DocumentRecord.id)
        )
        async with self._session(f"fetch collection '{collection_id}'") as session:
            result = await session.execute(query)
            records = list(result.scalars().all())

        try:
            documents = [self._to_document(record) for record in records]
        except ValidationError as exc:
            raise StoreUnavailableError(
                f"Collection '{collection_id}' contains a malformed document: {exc}"
            ) from exc

        logger.debug(f"Fetched {len(documents)} documents from collection '{collection_id}'")
        return documents

    async def insert(self, collection_id: str, document: Document) -> Document:
        """Insert a single document."""
        async with self._session(f"insert into collection '{collection_id}'") as session:
            session.add(self._to_record(collection_id, document))
        return document

    async def insert_many(
        self, collection_id: str, documents: Sequence[Document]
    ) -> list[Document]:
        """Insert documents in one transaction, preserving their order."""
        if not documents:
            return []

        async with self._session(f"insert into collection '{collection_id}'") as session:
            session.add_all([self._to_record(collection_id, document) for document in documents])

        logger.debug(f"Inserted {len(documents)} documents into collection '{collection_id}'")
        return list(documents)

    async def count(self, collection_id: str) -> int:
        """Number of documents in the collection."""
        query = (
            select(func.count())
            .select_from(DocumentRecord)
            .where(DocumentRecord.collection_id == collection_id)
        )
        async with self._session(f"count collection '{collection_id}'") as session:
            result = await session.execute(query)
            return int(result.scalar_one())

    async def ping(self) -> None:
        """Run a trivial query to confirm the database is reachable."""
        async with self._session("answer ping") as session:
            await session.execute(text("SELECT 1"))
