"""
共通フィクスチャ: 問題ファクトリ、スタブ埋め込みプロバイダ。

OpenAI / DB には接続しない。settings 読み込み用のダミー API キーだけ設定する。
"""

import math
import os

os.environ.setdefault("OPENAI_API_KEY", "test-key")

import pytest

from sakumon.schema.problem import Problem


class StubEmbedder:
    """prompt → ベクトルの対応表から返すスタブ。呼び出し回数も記録する。"""

    def __init__(self, table: dict[str, list[float]] | None = None, error: Exception | None = None):
        self.table = table or {}
        self.error = error
        self.calls: list[list[str]] = []

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return [self.table[t] for t in texts]


def unit_vector(dim: int, index: int) -> list[float]:
    v = [0.0] * dim
    v[index] = 1.0
    return v


def near_vector(dim: int, base: int, spare: int, similarity: float) -> list[float]:
    """unit_vector(dim, base) とのコサイン類似度が similarity になるベクトル。"""
    v = [0.0] * dim
    v[base] = similarity
    v[spare] = math.sqrt(1 - similarity * similarity)
    return v


def make_mcq(prompt: str = "y=2x+1 の傾きは？", choices=None, answer: str = "2", **kw) -> Problem:
    return Problem(
        type="mcq",
        prompt=prompt,
        choices=["1", "2", "3", "4"] if choices is None else choices,
        answer=answer,
        **kw,
    )


def make_free(prompt: str = "一次関数の定義を説明せよ。", answer: str = "y=ax+b の形で表される関数", **kw) -> Problem:
    return Problem(type="free", prompt=prompt, answer=answer, **kw)


@pytest.fixture
def stub_embedder_factory():
    return StubEmbedder
