"""
OpenAI Embeddings API によるテキスト埋め込み。
パイプラインには EmbeddingProvider として注入する。
"""

import logging
from typing import Protocol

from openai import OpenAI, OpenAIError

from sakumon.core.config import settings

logger = logging.getLogger(__name__)


class EmbeddingUnavailable(Exception):
    """埋め込みを取得できなかった (生成リクエスト全体の失敗として扱う)。"""


class EmbeddingProvider(Protocol):
    def embed_many(self, texts: list[str]) -> list[list[float]]:
        """texts と同じ順序・同じ件数のベクトルを返す。"""
        ...


class EmbeddingService:
    def __init__(self) -> None:
        self._client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
        )

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            resp = self._client.embeddings.create(
                model=settings.EMBEDDING_MODEL,
                input=texts,
                dimensions=settings.EMBEDDING_DIMENSIONS,
            )
        except OpenAIError as exc:
            logger.warning("埋め込み API 呼び出し失敗: %s", exc)
            raise EmbeddingUnavailable(str(exc)) from exc

        vectors = [d.embedding for d in sorted(resp.data, key=lambda d: d.index)]
        if len(vectors) != len(texts):
            raise EmbeddingUnavailable(
                f"埋め込み件数が一致しません: 入力={len(texts)} 出力={len(vectors)}"
            )
        return vectors

    def embed(self, text: str) -> list[float]:
        return self.embed_many([text])[0]


embedding_service = EmbeddingService()
