"""
プリント生成 CLI. 生成 → mcq 検査 → ルーブリック補完 → 重複除去 → 補充 までを行う。

使用例:
  python -m sakumon.generate_cli --subject 数学 --unit 一次関数
  python -m sakumon.generate_cli --subject 社会 --unit 太平洋戦争 --mcq 5 --free 2 --keyword 年表 --pretty
  python -m sakumon.generate_cli ... --save  # worksheets / problems に保存
ログは stderr、JSON 結果は stdout に出力する。
"""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from sakumon.schema.problem import GenerateRequest
from sakumon.services.embedding import EmbeddingUnavailable
from sakumon.services.worksheet_generator import worksheet_service

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="教科・単元から問題プリントを生成します。")
    parser.add_argument("--subject", required=True, help="教科 (例: 数学)")
    parser.add_argument("--unit", required=True, help="単元 (例: 一次関数)")
    parser.add_argument("--range", default=None, help="出題範囲")
    parser.add_argument("--mcq", type=int, default=None, help="選択問題数 (既定 7)")
    parser.add_argument("--free", type=int, default=None, help="記述問題数 (既定 3)")
    parser.add_argument("--keyword", action="append", default=None, help="キーワード (複数指定可)")
    parser.add_argument("--objective", action="append", default=None, help="学習目標 (複数指定可)")
    parser.add_argument("--save", action="store_true", help="結果を DB に保存")
    parser.add_argument("--pretty", action="store_true", help="JSON を整形して出力")
    return parser


def build_request(args: argparse.Namespace) -> GenerateRequest:
    payload: dict = {
        "subject": args.subject,
        "unit": args.unit,
        "range": args.range,
        "keywords": args.keyword,
        "objectives": args.objective,
    }
    if args.mcq is not None or args.free is not None:
        ratio = {}
        if args.mcq is not None:
            ratio["mcq"] = args.mcq
        if args.free is not None:
            ratio["free"] = args.free
        payload["ratio"] = ratio
    return GenerateRequest.model_validate(payload)


def main() -> None:
    args = build_parser().parse_args()

    try:
        req = build_request(args)
    except ValidationError as exc:
        print(f"入力エラー: {exc}", file=sys.stderr)
        sys.exit(1)

    logger.info("プリント生成開始 subject=%s unit=%s target=%d save=%s", req.subject, req.unit, req.target, args.save)
    try:
        if args.save:
            worksheet_id, result, _ = worksheet_service.generate_and_store(req)
        else:
            worksheet_id, result = None, worksheet_service.generate(req)
    except EmbeddingUnavailable as exc:
        logger.exception("埋め込み取得失敗")
        print(f"生成失敗: {exc}", file=sys.stderr)
        sys.exit(1)

    out = result.model_dump(by_alias=True)
    if worksheet_id is not None:
        out["worksheet_id"] = worksheet_id
    print(json.dumps(out, ensure_ascii=False, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
