"""
FastAPI アプリ: プリント生成・取得、選択/記述問題の採点、類似問題検索。
"""

import logging

from fastapi import FastAPI, HTTPException

from sakumon.api.schemas import (
    GenerateResponse,
    GradeFreeRequest,
    GradeMcqRequest,
    ProblemListResponse,
    SimilarProblem,
    SimilarSearchRequest,
    SimilarSearchResponse,
    StoredProblem,
    WorksheetResponse,
)
from sakumon.db.connection import get_session
from sakumon.db.models import ProblemRecord
from sakumon.db.repositories.worksheet import problem_from_record, worksheet_repo
from sakumon.schema.problem import GenerateRequest
from sakumon.services.embedding import EmbeddingUnavailable, embedding_service
from sakumon.services.grading import FreeGradeResult, GradeResult, free_grading_service, grade_mcq
from sakumon.services.worksheet_generator import worksheet_service

logger = logging.getLogger(__name__)


def _stored(row: ProblemRecord) -> StoredProblem:
    return StoredProblem(
        id=row.id,
        position=row.position,
        **problem_from_record(row).model_dump(by_alias=True),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Sakumon API",
        description="教科・単元からの問題プリント生成、保存済みプリントの取得と採点",
        version="0.1.0",
    )

    @app.post(
        "/api/generate",
        response_model=GenerateResponse,
        summary="プリント生成",
        description="LLM で問題を生成し、mcq 検査・ルーブリック補完・重複除去を経て保存する。",
    )
    def generate(body: GenerateRequest) -> GenerateResponse:
        try:
            worksheet_id, result, rows = worksheet_service.generate_and_store(body)
            return GenerateResponse(
                worksheet_id=worksheet_id,
                items=[_stored(r) for r in rows],
                issues=result.issues,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except EmbeddingUnavailable:
            logger.exception("埋め込み取得失敗")
            raise HTTPException(status_code=503, detail="generate failed: embedding unavailable")
        except Exception:
            logger.exception("プリント生成失敗")
            raise HTTPException(status_code=500, detail="generate failed")

    @app.get(
        "/api/worksheets/{worksheet_id:int}",
        response_model=WorksheetResponse,
        summary="プリント取得",
    )
    def get_worksheet(worksheet_id: int) -> WorksheetResponse:
        with get_session() as session:
            ws = worksheet_repo.get(session, worksheet_id)
        if not ws:
            raise HTTPException(status_code=404, detail="worksheet not found")
        return WorksheetResponse(
            id=ws.id,
            subject=ws.subject,
            unit=ws.unit,
            range=ws.range,
            created_at=ws.created_at,
        )

    @app.get(
        "/api/worksheets/{worksheet_id:int}/problems",
        response_model=ProblemListResponse,
        summary="プリントの問題一覧 (出題順)",
    )
    def list_problems(worksheet_id: int) -> ProblemListResponse:
        with get_session() as session:
            rows = worksheet_repo.list_problems(session, worksheet_id)
            items = [_stored(r) for r in rows]
        return ProblemListResponse(items=items)

    @app.post(
        "/api/grade/mcq",
        response_model=GradeResult,
        summary="選択問題の採点",
    )
    def grade(body: GradeMcqRequest) -> GradeResult:
        with get_session() as session:
            problems = worksheet_repo.list_problems(session, body.worksheet_id)
        return grade_mcq(problems, body.answers)

    @app.post(
        "/api/grade/free",
        response_model=FreeGradeResult,
        summary="記述問題の採点",
        description="ルーブリックに照らして ○/△/× と 50 字以内の短評を返す。",
    )
    def grade_free(body: GradeFreeRequest) -> FreeGradeResult:
        try:
            return free_grading_service.grade_free(body.answer, body.rubric)
        except Exception:
            logger.exception("記述採点失敗")
            raise HTTPException(status_code=500, detail="grade failed")

    @app.post(
        "/api/problems/similar",
        response_model=SimilarSearchResponse,
        summary="類似問題検索",
        description="問題文を埋め込み、保存済み問題から類似度の高い順に返す。",
    )
    def similar(body: SimilarSearchRequest) -> SimilarSearchResponse:
        try:
            query_embedding = embedding_service.embed(body.query)
        except EmbeddingUnavailable:
            logger.exception("検索クエリの埋め込み失敗")
            raise HTTPException(status_code=503, detail="search failed: embedding unavailable")
        with get_session() as session:
            hits = worksheet_repo.find_similar_problems(
                session, query_embedding, subject=body.subject, unit=body.unit, limit=body.limit
            )
            rows = {r.id: r for r in worksheet_repo.get_problems_by_ids(session, [pid for pid, _ in hits])}
            items = [
                SimilarProblem(
                    worksheet_id=rows[pid].worksheet_id,
                    similarity=score,
                    **_stored(rows[pid]).model_dump(by_alias=True),
                )
                for pid, score in hits
                if pid in rows
            ]
        return SimilarSearchResponse(items=items)

    return app


app = create_app()
