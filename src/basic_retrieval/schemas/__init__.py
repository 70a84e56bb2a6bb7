"""Pydantic schemas for basic-retrieval."""

from basic_retrieval.schemas.document import (
    Document,
    DocumentCreate,
    MetadataValue,
    RankedResult,
)

__all__ = [
    "Document",
    "DocumentCreate",
    "MetadataValue",
    "RankedResult",
]
