"""
問題 (Problem) と生成リクエスト/結果のスキーマ。
- JSON 上のフィールド名は maxPoints など元の表記、Python 側は snake_case。
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ProblemType = Literal["mcq", "free"]

DEFAULT_MCQ = 7
DEFAULT_FREE = 3


class RubricCriterion(BaseModel):
    """採点基準の一項目。"""

    name: str
    desc: str | None = None
    points: int


class Rubric(BaseModel):
    """記述問題の採点ルーブリック: 満点と観点の一覧。"""

    model_config = ConfigDict(populate_by_name=True)

    max_points: int | None = Field(None, alias="maxPoints", description="満点")
    criteria: list[RubricCriterion] = Field(default_factory=list, description="採点観点")


class Problem(BaseModel):
    """生成直後 (保存前) の問題 1 問。"""

    type: ProblemType
    prompt: str = Field(..., description="問題文 (LaTeX を含むことがある)")
    choices: list[str] | None = Field(None, description="選択肢 (mcq のみ)")
    answer: str
    explanation: str | None = None
    difficulty: int | None = Field(None, ge=1, le=5)
    objectives: list[str] | None = None
    rubric: Rubric | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


class Ratio(BaseModel):
    mcq: int = Field(DEFAULT_MCQ, ge=0)
    free: int = Field(DEFAULT_FREE, ge=0)


class GenerateRequest(BaseModel):
    """プリント生成リクエスト。"""

    subject: str = Field(..., min_length=1, description="教科 (数学 / 理科 / 社会 など)")
    unit: str = Field(..., min_length=1, description="単元")
    range: str | None = Field(None, description="出題範囲")
    ratio: Ratio | None = None
    keywords: list[str] | None = None
    objectives: list[str] | None = None

    @property
    def effective_ratio(self) -> Ratio:
        return self.ratio or Ratio()

    @property
    def target(self) -> int:
        """目標問題数。0 の項目は既定値 (7 / 3) で数える。"""
        ratio = self.effective_ratio
        return (ratio.mcq or DEFAULT_MCQ) + (ratio.free or DEFAULT_FREE)


class WorksheetResult(BaseModel):
    """パイプラインの出力: 最終問題リストと指摘ログ。

    vectors は items と並行する埋め込み (保存用)。
    """

    items: list[Problem] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)
    vectors: list[list[float]] = Field(default_factory=list, exclude=True)
