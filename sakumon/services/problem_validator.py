"""
選択問題 (mcq) の構造チェック: 選択肢数・正答の所属・選択肢の重複。
重複は自動で取り除き、それ以外は指摘のみ (問題は落とさない)。
"""

import logging

from sakumon.schema.problem import Problem

logger = logging.getLogger(__name__)


def dedupe_choices(choices: list[str]) -> list[str]:
    """出現順を保ったまま重複した選択肢を除く。"""
    seen: set[str] = set()
    unique: list[str] = []
    for choice in choices:
        if choice in seen:
            continue
        seen.add(choice)
        unique.append(choice)
    return unique


def ensure_mcq_validity(items: list[Problem]) -> tuple[list[Problem], list[str]]:
    """
    各 mcq を検査し (整形済みの問題リスト, 指摘リスト) を返す。
    返すリストは入力と同じ長さ・順序。入力の Problem は変更しない。
    """
    issues: list[str] = []
    fixed: list[Problem] = []
    for idx, item in enumerate(items, 1):
        if item.type != "mcq":
            fixed.append(item)
            continue

        if not item.choices or len(item.choices) < 2:
            issues.append(f"Q{idx}: choices が不足しています")
            fixed.append(item)
            continue

        if item.answer not in item.choices:
            issues.append(f"Q{idx}: answer が choices に含まれていません")

        unique = dedupe_choices(item.choices)
        if len(unique) != len(item.choices):
            issues.append(f"Q{idx}: choices に重複があります")
        fixed.append(item.model_copy(update={"choices": unique}))

    if issues:
        logger.info("mcq 検査の指摘 %d 件", len(issues))
    return fixed, issues
