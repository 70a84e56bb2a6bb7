"""Tests for document schemas."""

import pytest
from pydantic import ValidationError

from basic_retrieval.schemas import Document, DocumentCreate, RankedResult


def test_document_embedding_is_immutable():
    document = Document(text="Copa America", embedding=[0.6, 0.8])

    assert document.embedding == (0.6, 0.8)
    with pytest.raises(ValidationError):
        document.embedding = (1.0, 0.0)  # type: ignore[misc]


def test_empty_embedding_is_treated_as_missing():
    document = Document(text="no vector", embedding=[])

    assert document.embedding is None
    assert not document.has_embedding


def test_metadata_accepts_scalars_only():
    document = Document(
        text="match",
        metadata={"season": "2017", "runs": 5, "rate": 7.5, "won": True, "city": None},
    )
    assert document.metadata["won"] is True
    assert document.metadata["runs"] == 5

    with pytest.raises(ValidationError):
        Document(text="match", metadata={"teams": ["KKR", "RCB"]})


@pytest.mark.parametrize("text", ["", "   "])
def test_document_create_rejects_blank_text(text):
    with pytest.raises(ValidationError):
        DocumentCreate(text=text)


def test_ranked_result_score_is_bounded():
    document = Document(text="x")
    assert RankedResult(document=document, score=1.0).score == 1.0
    with pytest.raises(ValidationError):
        RankedResult(document=document, score=1.5)
