"""Document schemas shared by the store, the ranker and the retrieval service."""

from typing import Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

MetadataValue = Union[bool, int, float, str, None]


class Document(BaseModel):
    """A retrievable passage of text.

    The embedding is attached once at ingestion time and is stored as a tuple so it
    cannot be changed afterwards. A document without an embedding still takes part
    in ranking, with a similarity of 0 to every query.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Passage text")
    metadata: Dict[str, MetadataValue] = Field(
        default_factory=dict, description="Scalar metadata attached at ingestion"
    )
    embedding: Optional[Tuple[float, ...]] = Field(
        None, description="Unit-length embedding of the text, if computed"
    )

    @field_validator("embedding", mode="before")
    @classmethod
    def empty_embedding_is_missing(cls, value):
        if value is not None and len(value) == 0:
            return None
        return value

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None


class DocumentCreate(BaseModel):
    """Input to ingestion: text and metadata, embedding computed on insert."""

    text: str = Field(..., min_length=1, description="Passage text")
    metadata: Dict[str, MetadataValue] = Field(default_factory=dict)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Document text must not be blank")
        return value


class RankedResult(BaseModel):
    """A document paired with its similarity to the query."""

    model_config = ConfigDict(frozen=True)

    document: Document
    score: float = Field(..., ge=-1.0, le=1.0, description="Cosine similarity to the query")
