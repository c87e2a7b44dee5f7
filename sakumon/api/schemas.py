"""
API リクエスト/レスポンススキーマ。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from sakumon.schema.problem import Problem, Rubric
from sakumon.services.grading import SubmittedAnswer


class StoredProblem(Problem):
    """保存済みの問題 (ID と出題順つき)。"""

    id: int
    position: int


# ----- 生成 -----


class GenerateResponse(BaseModel):
    worksheet_id: int = Field(..., description="保存したプリント ID")
    items: list[StoredProblem] = Field(..., description="保存済みの問題 (出題順)")
    issues: list[str] = Field(default_factory=list, description="検査・重複判定の指摘")


# ----- プリント取得 -----


class WorksheetResponse(BaseModel):
    id: int
    subject: str
    unit: str
    range: str | None = None
    created_at: datetime | None = None


class ProblemListResponse(BaseModel):
    items: list[StoredProblem]


# ----- 採点 -----


class GradeMcqRequest(BaseModel):
    worksheet_id: int
    answers: list[SubmittedAnswer]


class GradeFreeRequest(BaseModel):
    answer: str = Field(..., description="生徒の回答")
    rubric: Rubric = Field(..., description="採点ルーブリック")


# ----- 類似問題検索 -----


class SimilarSearchRequest(BaseModel):
    query: str = Field(..., min_length=1, description="検索したい問題文")
    subject: str | None = None
    unit: str | None = None
    limit: int = Field(10, ge=1, le=50)


class SimilarProblem(StoredProblem):
    worksheet_id: int
    similarity: float


class SimilarSearchResponse(BaseModel):
    items: list[SimilarProblem]
