"""
採点。
- 選択問題: 提出された答えを保存済みの正答と文字列一致で比べる。
- 記述問題: ルーブリックに照らして LLM が ○/△/× と短評を付ける。
"""

import json
import logging
from typing import Literal

from openai import OpenAI
from pydantic import BaseModel

from sakumon.core.config import settings
from sakumon.db.models import ProblemRecord
from sakumon.schema.problem import Rubric

logger = logging.getLogger(__name__)

Mark = Literal["○", "△", "×"]
MARKS = ("○", "△", "×")
FALLBACK_MARK = "△"
FALLBACK_COMMENT = "観点に照らして一部不十分です。"


class SubmittedAnswer(BaseModel):
    problem_id: int
    answer: str


class AnswerDetail(BaseModel):
    problem_id: int
    correct: bool
    expected: str | None = None


class GradeResult(BaseModel):
    score: int
    total: int
    details: list[AnswerDetail]


def grade_mcq(problems: list[ProblemRecord], answers: list[SubmittedAnswer]) -> GradeResult:
    """存在しない問題・mcq 以外の問題への回答は不正解として数える。"""
    by_id = {p.id: p for p in problems}
    details: list[AnswerDetail] = []
    for submitted in answers:
        problem = by_id.get(submitted.problem_id)
        correct = problem is not None and problem.type == "mcq" and problem.answer == submitted.answer
        details.append(
            AnswerDetail(
                problem_id=submitted.problem_id,
                correct=correct,
                expected=problem.answer if problem is not None else None,
            )
        )
    return GradeResult(
        score=sum(1 for d in details if d.correct),
        total=len(answers),
        details=details,
    )


class FreeGradeResult(BaseModel):
    mark: Mark
    comment: str


def build_free_grade_prompt(answer: str, rubric: Rubric) -> str:
    rubric_json = json.dumps(rubric.model_dump(by_alias=True, exclude_none=True), ensure_ascii=False)
    return "\n".join(
        [
            "次の回答をルーブリックに照らして、○/△/×のいずれかと50字以内の短評を提案してください。",
            f"rubric: {rubric_json}",
            f"answer: {answer}",
            "出力はJSON: { mark: '○'|'△'|'×', comment: string } のみ。",
        ]
    )


def parse_free_grade(raw: str) -> FreeGradeResult:
    """
    LLM 出力から評価を取り出す。解析できない・値が欠けている場合は
    △ と既定の短評で埋める。
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("記述採点の JSON 解析失敗 raw=%r", raw)
        parsed = {}
    if not isinstance(parsed, dict):
        parsed = {}

    mark = parsed.get("mark")
    if mark not in MARKS:
        mark = FALLBACK_MARK
    comment = parsed.get("comment")
    if not isinstance(comment, str) or not comment.strip():
        comment = FALLBACK_COMMENT
    return FreeGradeResult(mark=mark, comment=comment.strip())


class FreeGradingService:
    """記述問題の回答をルーブリックに照らして LLM で評価する。"""

    def __init__(self) -> None:
        self._client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
        )

    def grade_free(self, answer: str, rubric: Rubric) -> FreeGradeResult:
        response = self._client.chat.completions.create(
            model=settings.OPENAI_MODEL,
            temperature=0.0,
            response_format={"type": "json_object"},
            messages=[{"role": "user", "content": build_free_grade_prompt(answer, rubric)}],
        )
        raw = response.choices[0].message.content or "{}"
        result = parse_free_grade(raw)
        logger.info("記述採点 mark=%s", result.mark)
        return result


free_grading_service = FreeGradingService()
