"""Typed errors for the retrieval pipeline.

Every failure surfaced by ``RetrievalService.retrieve`` is a ``RetrievalFailedError``
whose ``cause`` is one of the specific errors below, so callers can decide whether
to retry, surface the error, or answer without retrieved context.
"""

from typing import Optional


class RetrievalError(Exception):
    """Base class for all retrieval failures."""


class InvalidQueryError(RetrievalError, ValueError):
    """Raised when the query text is empty or contains only whitespace."""


class DimensionMismatchError(RetrievalError, ValueError):
    """Raised when two vectors that must be compared have different lengths."""

    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message
            or f"Vector dimensions do not match: expected {expected}, got {actual}"
        )


class ModelUnavailableError(RetrievalError, RuntimeError):
    """Raised when the embedding model cannot be loaded or queried."""


class StoreUnavailableError(RetrievalError, RuntimeError):
    """Raised when the document store cannot be reached or read."""


class DeadlineExceededError(RetrievalError, TimeoutError):
    """Raised when a retrieval call runs past its deadline."""


class RetrievalFailedError(RetrievalError):
    """Top-level failure of a retrieval call.

    Carries the specific error as ``cause`` and the pipeline stage that was
    running when it happened as ``stage``.
    """

    def __init__(self, stage: str, cause: RetrievalError):
        self.stage = stage
        self.cause = cause
        super().__init__(f"Retrieval failed while {stage}: {cause}")

    @property
    def retryable(self) -> bool:
        """Whether the same call might succeed if issued again."""
        return isinstance(
            self.cause, (ModelUnavailableError, StoreUnavailableError, DeadlineExceededError)
        )
