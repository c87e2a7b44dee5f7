"""
SQLModel テーブル定義 (pgvector 含む)。
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from pgvector.sqlalchemy import Vector
from sqlmodel import Field, SQLModel

from sakumon.core.config import settings


class Worksheet(SQLModel, table=True):
    """生成したプリント 1 枚。"""

    __tablename__ = "worksheets"

    id: int | None = Field(default=None, primary_key=True)
    subject: str = Field(nullable=False)
    unit: str = Field(nullable=False)
    range: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )


class ProblemRecord(SQLModel, table=True):
    """プリント内の問題。position は 1 始まりの出題順、embedding は問題文のベクトル。"""

    __tablename__ = "problems"

    id: int | None = Field(default=None, primary_key=True)
    worksheet_id: int = Field(
        sa_column=Column(Integer, ForeignKey("worksheets.id", ondelete="CASCADE"), nullable=False)
    )
    position: int = Field(nullable=False)
    type: str = Field(nullable=False)  # "mcq" | "free"
    prompt: str = Field(sa_column=Column(Text, nullable=False))
    choices: list[str] | None = Field(default=None, sa_column=Column(JSONB, nullable=True))
    answer: str = Field(sa_column=Column(Text, nullable=False))
    explanation: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    difficulty: int | None = Field(default=None)
    objectives: list[str] | None = Field(default=None, sa_column=Column(JSONB, nullable=True))
    rubric: dict[str, Any] | None = Field(default=None, sa_column=Column(JSONB, nullable=True))  # maxPoints, criteria
    meta: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSONB, server_default="{}"),
    )
    embedding: list[float] | None = Field(
        default=None, sa_column=Column(Vector(settings.EMBEDDING_DIMENSIONS), nullable=True)
    )
    created_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )
