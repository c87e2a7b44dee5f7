"""
埋め込みのコサイン類似度による重複問題の除去と、目標数までの補充 (backfill)。
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence, TypeVar

from sakumon.schema.problem import Problem

logger = logging.getLogger(__name__)

# これを「超える」類似度で重複とみなす (0.9 ちょうどは重複ではない)
DUPLICATE_THRESHOLD = 0.9
_EPS = 1e-9

T = TypeVar("T")


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    dot = 0.0
    na = 0.0
    nb = 0.0
    for x, y in zip(a, b):
        dot += x * y
        na += x * x
        nb += y * y
    return dot / (math.sqrt(na) * math.sqrt(nb) + _EPS)


@dataclass
class DedupResult:
    kept: list[Problem] = field(default_factory=list)
    kept_vectors: list[list[float]] = field(default_factory=list)
    # kept の各要素が元リストの何番目 (0 始まり) か
    kept_indices: list[int] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)


def deduplicate(items: list[Problem], vectors: list[list[float]]) -> DedupResult:
    """
    先頭から順に見て、既に残した問題のどれかと類似度が閾値を超えたら落とす。
    先に出た方が常に残る。指摘の番号は元リスト上の 1 始まりの位置。
    """
    if len(items) != len(vectors):
        raise ValueError(f"items と vectors の件数が一致しません: {len(items)} != {len(vectors)}")

    result = DedupResult()
    for i, (item, vec) in enumerate(zip(items, vectors)):
        if any(cosine(kv, vec) > DUPLICATE_THRESHOLD for kv in result.kept_vectors):
            result.issues.append(f"重複疑い: Q{i + 1}")
            continue
        result.kept.append(item)
        result.kept_vectors.append(vec)
        result.kept_indices.append(i)

    if result.issues:
        logger.info("重複疑い %d 件を除外 (残り %d 件)", len(result.issues), len(result.kept))
    return result


def select_backfill(kept: list[T], original: list[T], target: int) -> list[T]:
    """
    kept が target に届かないとき、元リストの len(kept) 番目から位置で補充する。
    重複として落とした問題が戻ることもある (件数を優先)。
    """
    selected = list(kept)
    while len(selected) < target and len(selected) < len(original):
        selected.append(original[len(selected)])
    return selected[:target]
