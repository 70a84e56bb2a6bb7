"""CLI commands for basic-retrieval."""

from . import db, documents

__all__ = ["db", "documents"]
