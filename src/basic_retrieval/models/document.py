"""Persisted document rows.

A row holds the document text, its scalar metadata and the embedding computed
at ingestion time. Rows are never updated once written.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from basic_retrieval.models.base import Base


class DocumentRecord(Base):
    """A document in a collection, with its precomputed embedding."""

    __tablename__ = "document"
    __table_args__ = (Index("ix_document_collection_id", "collection_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[str] = mapped_column(String, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    # "metadata" is reserved by the declarative base
    doc_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    embedding: Mapped[Optional[list[float]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        dims = len(self.embedding) if self.embedding else 0
        return f"DocumentRecord(id={self.id}, collection_id='{self.collection_id}', dims={dims})"
