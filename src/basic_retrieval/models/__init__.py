"""Models package for basic-retrieval."""

from basic_retrieval.models.base import Base
from basic_retrieval.models.document import DocumentRecord

__all__ = [
    "Base",
    "DocumentRecord",
]
