"""漫画価格比較: メインエントリーポイント.

サブコマンド:
  serve   API サーバーを起動
  search  1タイトルを検索して JSON を出力
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from datetime import datetime

import uvicorn

from manga_price.api import build_aggregator, create_app
from manga_price.config import API_HOST, API_PORT, DEFAULT_CURRENCY, LOG_DIR, LOG_LEVEL
from manga_price.errors import InvalidRequest


def setup_logging() -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"manga_price_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def serve(host: str, port: int) -> None:
    """API サーバーを起動する (ブロッキング)."""
    logger = logging.getLogger(__name__)
    logger.info("=== API サーバー起動: http://%s:%d ===", host, port)
    uvicorn.run(create_app(), host=host, port=port, log_level=LOG_LEVEL.lower())


def search(title: str, currency: str, mock: bool) -> int:
    """1タイトルを検索して結果を標準出力に書く."""
    logger = logging.getLogger(__name__)
    start_time = time.time()

    aggregator = build_aggregator()
    try:
        result = asyncio.run(aggregator.aggregate(title, currency, force_mock=mock))
    except InvalidRequest as e:
        logger.error("検索できません: %s", e)
        return 2
    finally:
        aggregator.close()
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))

    elapsed = time.time() - start_time
    logger.info(
        "店舗: %d 件, エラー: %d 件, 所要時間: %.1f 秒",
        len(result.items), len(result.partial_errors), elapsed,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manga-price", description="漫画価格比較")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="API サーバーを起動")
    p_serve.add_argument("--host", default=API_HOST)
    p_serve.add_argument("--port", type=int, default=API_PORT)

    p_search = sub.add_parser("search", help="タイトルを検索")
    p_search.add_argument("title")
    p_search.add_argument("--currency", default=DEFAULT_CURRENCY)
    p_search.add_argument("--mock", action="store_true", help="ライブ取得せずモックを返す")
    return parser


def run(argv: list[str] | None = None) -> int:
    """メイン処理."""
    args = build_parser().parse_args(argv)
    setup_logging()

    if args.command == "serve":
        serve(args.host, args.port)
        return 0
    return search(args.title, args.currency, args.mock)


if __name__ == "__main__":
    sys.exit(run())
