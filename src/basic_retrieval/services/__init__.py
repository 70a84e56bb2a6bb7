from basic_retrieval.services.ingestion_service import IngestionService
from basic_retrieval.services.retrieval_service import RetrievalService, RetrievalStage
from basic_retrieval.services.similarity import SimilarityRanker, compute_similarity

__all__ = [
    "IngestionService",
    "RetrievalService",
    "RetrievalStage",
    "SimilarityRanker",
    "compute_similarity",
]
