from sakumon.services.embedding import EmbeddingUnavailable, embedding_service
from sakumon.services.pipeline import run_pipeline
from sakumon.services.worksheet_generator import worksheet_service

__all__ = [
    "EmbeddingUnavailable",
    "embedding_service",
    "run_pipeline",
    "worksheet_service",
]
