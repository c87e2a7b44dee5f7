"""
教科・単元からプリント用の問題を LLM で生成し、パイプラインで整えて保存する。
"""

import json
import logging

from openai import OpenAI
from pydantic import TypeAdapter, ValidationError

from sakumon.core.config import settings
from sakumon.db.connection import get_session
from sakumon.db.models import ProblemRecord
from sakumon.db.repositories.worksheet import worksheet_repo
from sakumon.schema.problem import GenerateRequest, Problem, WorksheetResult
from sakumon.services.embedding import EmbeddingProvider, embedding_service
from sakumon.services.pipeline import run_pipeline

logger = logging.getLogger(__name__)

_problem_list = TypeAdapter(list[Problem])

STYLE_HINTS = "styleHints: 語調は丁寧。用語は教科書準拠。難易度は1-2:40% / 3:40% / 4-5:20%。"

SUBJECT_HINTS: dict[str, str] = {
    "数学": "重点: 傾きと切片, 直線の式, 交点計算。ダミー: 単位/符号/係数の取り違え。",
    "理科": "重点: 化学式の表記・式量・係数合わせ。ダミー: 係数過不足・価数取り違え。",
    "社会": "重点: 年代・出来事・用語・因果。ダミー: 年号シャッフル・誤因果。",
}


def build_prompt(req: GenerateRequest) -> tuple[str, str]:
    ratio = req.effective_ratio
    system_prompt = "\n".join(
        [
            "あなたは高校教員のための問題作成アシスタントです。",
            "次の制約を厳守して、有効なJSONのみを出力してください。",
            "- 言語: 日本語（高校生向け）。",
            f"- 問題タイプ: mcq {ratio.mcq}問 / free {ratio.free}問。",
            "- 各問は次の全フィールドを必ず含む: type, prompt, choices, answer, explanation(120字以内), difficulty(1-5), objectives, rubric, meta。",
            "- free のとき choices は空配列 [] を入れる。mcq のとき rubric は {\"maxPoints\":0, \"criteria\":[]} を入れる。",
            "- meta は常に空オブジェクト {} を入れる。",
            "- 数学はLaTeX記法（例: `y=ax+b`）。",
        ]
    )

    lines = [f"subject: {req.subject} / unit: {req.unit}"]
    if req.range:
        lines.append(f"range: {req.range}")
    if req.keywords:
        lines.append(f"keywords: {', '.join(req.keywords)}")
    if req.objectives:
        lines.append(f"objectives: {', '.join(req.objectives)}")
    lines.append(STYLE_HINTS)
    if req.subject in SUBJECT_HINTS:
        lines.append(SUBJECT_HINTS[req.subject])
    lines.append('出力は {"items": [...]} 形式のJSONのみ。文字列の中に改行を含んでもよいが、JSON外にテキストを出さないこと。')
    return system_prompt, "\n".join(lines)


def parse_items(raw: str) -> list[Problem]:
    """
    LLM 出力を問題リストにする。配列そのもの、または {"items": [...]} を受け付ける。
    解析できなければ空リスト (「生成 0 件」として後段に流す)。
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("生成結果の JSON 解析失敗: %s", exc)
        return []

    if isinstance(parsed, dict):
        parsed = parsed.get("items")
    if not isinstance(parsed, list):
        logger.warning("生成結果に問題配列がありません")
        return []

    try:
        return _problem_list.validate_python(parsed)
    except ValidationError as exc:
        logger.warning("生成結果のスキーマ検証失敗: %s", exc)
        return []


class WorksheetGenerator:
    """LLM で問題候補を生成する。"""

    def __init__(self) -> None:
        self._client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
        )

    def generate_items(self, req: GenerateRequest) -> list[Problem]:
        system_prompt, user_prompt = build_prompt(req)
        logger.info("LLM 問題生成呼び出し中 subject=%s unit=%s target=%d", req.subject, req.unit, req.target)
        response = self._client.chat.completions.create(
            model=settings.OPENAI_MODEL,
            temperature=settings.OPENAI_TEMPERATURE,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        raw = response.choices[0].message.content or "{}"
        items = parse_items(raw)
        logger.info("問題生成完了 受信数=%d", len(items))
        return items


class WorksheetService:
    """生成 → パイプライン → 保存 をまとめる。"""

    def __init__(self, generator: WorksheetGenerator, embedder: EmbeddingProvider) -> None:
        self._generator = generator
        self._embedder = embedder

    def generate(self, req: GenerateRequest) -> WorksheetResult:
        raw_items = self._generator.generate_items(req)
        return run_pipeline(raw_items, req.target, self._embedder)

    def save_result(self, req: GenerateRequest, result: WorksheetResult) -> tuple[int, list[ProblemRecord]]:
        """結果を worksheets / problems に保存し、(プリント ID, 保存した問題行) を返す。"""
        with get_session() as session:
            worksheet = worksheet_repo.create_with_problems(
                session,
                subject=req.subject,
                unit=req.unit,
                range_=req.range,
                items=result.items,
                vectors=result.vectors,
            )
            worksheet_id = worksheet.id
            rows = worksheet_repo.list_problems(session, worksheet_id)
        logger.info("プリント保存完了 worksheet_id=%s 問題数=%d", worksheet_id, len(rows))
        return worksheet_id, rows

    def generate_and_store(self, req: GenerateRequest) -> tuple[int, WorksheetResult, list[ProblemRecord]]:
        """生成して保存する。戻り値の問題行は ID と出題順つき。"""
        result = self.generate(req)
        worksheet_id, rows = self.save_result(req, result)
        return worksheet_id, result, rows


worksheet_service = WorksheetService(WorksheetGenerator(), embedding_service)
