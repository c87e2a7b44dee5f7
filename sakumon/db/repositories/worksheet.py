"""
worksheets / problems テーブルへのアクセス。

類似検索は DB (pgvector) 側で行い、OpenAI はクエリ 1 件のベクトル化にだけ使う。
"""

from sqlalchemy import text
from sqlmodel import Session, select

from sakumon.db.models import ProblemRecord, Worksheet
from sakumon.schema.problem import Problem


def problem_from_record(row: ProblemRecord) -> Problem:
    return Problem.model_validate(
        {
            "type": row.type,
            "prompt": row.prompt,
            "choices": row.choices,
            "answer": row.answer,
            "explanation": row.explanation,
            "difficulty": row.difficulty,
            "objectives": row.objectives,
            "rubric": row.rubric,
            "meta": row.meta or {},
        }
    )


class WorksheetRepo:
    """プリントと問題の保存・取得 (SQLModel Session)。"""

    def create_with_problems(
        self,
        session: Session,
        *,
        subject: str,
        unit: str,
        range_: str | None,
        items: list[Problem],
        vectors: list[list[float]] | None = None,
    ) -> Worksheet:
        """プリントを作り、items を position 1..n で同一トランザクションに保存する。"""
        worksheet = Worksheet(subject=subject, unit=unit, range=range_)
        session.add(worksheet)
        session.flush()
        for position, item in enumerate(items, 1):
            embedding = vectors[position - 1] if vectors else None
            session.add(
                ProblemRecord(
                    worksheet_id=worksheet.id,
                    position=position,
                    type=item.type,
                    prompt=item.prompt,
                    choices=item.choices,
                    answer=item.answer,
                    explanation=item.explanation,
                    difficulty=item.difficulty,
                    objectives=item.objectives,
                    rubric=item.rubric.model_dump(by_alias=True) if item.rubric else None,
                    meta=item.meta,
                    embedding=embedding,
                )
            )
        session.commit()
        session.refresh(worksheet)
        return worksheet

    def get(self, session: Session, worksheet_id: int) -> Worksheet | None:
        return session.get(Worksheet, worksheet_id)

    def list_problems(self, session: Session, worksheet_id: int) -> list[ProblemRecord]:
        stmt = (
            select(ProblemRecord)
            .where(ProblemRecord.worksheet_id == worksheet_id)
            .order_by(ProblemRecord.position.asc())
        )
        return list(session.exec(stmt).all())

    def get_problems_by_ids(self, session: Session, problem_ids: list[int]) -> list[ProblemRecord]:
        if not problem_ids:
            return []
        stmt = select(ProblemRecord).where(ProblemRecord.id.in_(problem_ids))
        return list(session.exec(stmt).all())

    def find_similar_problems(
        self,
        session: Session,
        query_embedding: list[float],
        *,
        subject: str | None = None,
        unit: str | None = None,
        limit: int = 10,
    ) -> list[tuple[int, float]]:
        """
        保存済み問題を、クエリベクトルとのコサイン類似度が高い順に返す。

        Returns:
            (problem_id, similarity) のリスト。
        """
        # pgvector へは '[0.1,0.2,...]' 形式の文字列で渡す
        vec_str = "[" + ",".join(str(x) for x in query_embedding) + "]"
        sql = text("""
            SELECT p.id, 1 - (p.embedding <=> CAST(:query_embedding AS vector)) AS similarity
            FROM problems p
            JOIN worksheets w ON w.id = p.worksheet_id
            WHERE p.embedding IS NOT NULL
              AND (:subject = '' OR w.subject = :subject)
              AND (:unit = '' OR w.unit = :unit)
            ORDER BY p.embedding <=> CAST(:query_embedding AS vector)
            LIMIT :limit
        """)
        rows = session.execute(
            sql,
            {
                "query_embedding": vec_str,
                "subject": subject or "",
                "unit": unit or "",
                "limit": limit,
            },
        ).fetchall()
        return [(int(r[0]), float(r[1])) for r in rows]


worksheet_repo = WorksheetRepo()
