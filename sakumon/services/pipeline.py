"""
生成直後の問題リストを整えるパイプライン:
mcq 検査 → ルーブリック補完 → 埋め込み (外部) → 重複除去 → 目標数まで補充.

リクエストごとに独立して動き、モジュール内に状態を持たない。
埋め込みの失敗 (EmbeddingUnavailable) はそのまま呼び出し側へ伝える。
"""

import logging

from sakumon.schema.problem import Problem, WorksheetResult
from sakumon.services.dedup import deduplicate, select_backfill
from sakumon.services.embedding import EmbeddingProvider
from sakumon.services.problem_validator import ensure_mcq_validity
from sakumon.services.rubric import complete_rubrics

logger = logging.getLogger(__name__)


def run_pipeline(raw_items: list[Problem], target: int, embedder: EmbeddingProvider) -> WorksheetResult:
    if not raw_items:
        logger.info("生成問題 0 件 → 空の結果を返す")
        return WorksheetResult()

    validated, mcq_issues = ensure_mcq_validity(raw_items)
    with_rubric = complete_rubrics(validated)

    logger.info("埋め込み取得中 (問題数=%d)", len(with_rubric))
    vectors = embedder.embed_many([p.prompt for p in with_rubric])
    dedup = deduplicate(with_rubric, vectors)

    # 補充は位置ベースなので、元リスト上の位置で選んでから問題とベクトルを引く
    positions = select_backfill(dedup.kept_indices, list(range(len(with_rubric))), target)
    logger.info(
        "パイプライン完了 入力=%d 重複除去後=%d 最終=%d (目標=%d)",
        len(raw_items),
        len(dedup.kept),
        len(positions),
        target,
    )
    return WorksheetResult(
        items=[with_rubric[i] for i in positions],
        issues=mcq_issues + dedup.issues,
        vectors=[vectors[i] for i in positions],
    )
