"""漫画価格検索 REST API.

FastAPI アプリケーションで、全店舗の価格集約結果を返す。
スクレイピング失敗はモックで補完されるため、500 は想定外の障害のみ。
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from manga_price.aggregator import Aggregator
from manga_price.cache import ResultCache
from manga_price.config import DEFAULT_CURRENCY
from manga_price.currency import CurrencyConverter
from manga_price.errors import InvalidRequest
from manga_price.scrapers.registry import build_adapters

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def build_aggregator() -> Aggregator:
    """設定値から Aggregator を組み立てる."""
    return Aggregator(
        adapters=build_adapters(),
        cache=ResultCache(),
        converter=CurrencyConverter(),
    )


def create_app(aggregator: Aggregator | None = None) -> FastAPI:
    """FastAPI アプリを作成.

    Args:
        aggregator: 集約サービス。None なら設定値から生成。

    Returns:
        FastAPI アプリ
    """
    service = aggregator or build_aggregator()

    app = FastAPI(
        title="Manga Price Tracker API",
        description="Compare manga prices across Japanese and US stores",
        version=API_VERSION,
    )
    app.state.aggregator = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(InvalidRequest)
    async def invalid_request_handler(request: Request, exc: InvalidRequest) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("想定外のエラー: path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "An error occurred during search"},
        )

    @app.get("/")
    async def root() -> dict:
        return {
            "message": "Manga Price Tracker API",
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "stores": service.stores,
        }

    @app.get("/health")
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "version": API_VERSION,
            "cachedResults": len(service.cache),
        }

    @app.get("/search")
    async def search(
        title: str | None = None,
        currency: str = DEFAULT_CURRENCY,
        mock: bool = False,
    ) -> dict:
        """全店舗の価格を検索する. mock=true でライブ取得を行わない."""
        if not title or not title.strip():
            raise InvalidRequest("Missing title parameter")
        result = await service.aggregate(title, currency, force_mock=mock)
        return result.to_dict()

    @app.get("/currencies")
    async def currencies() -> dict:
        converter = service.converter
        rates = await asyncio.to_thread(converter.get_rates)
        return {
            "base": "USD",
            "rates": rates,
            "fallback": converter.using_fallback,
        }

    return app
