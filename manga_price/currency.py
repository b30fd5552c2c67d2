"""通貨換算モジュール.

USD 基準のレート表を外部 API から取得して 24 時間キャッシュする。
取得失敗時は期限切れのキャッシュ、それも無ければ固定レート表を使う。
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Callable

import requests

from manga_price.config import (
    FALLBACK_RATES,
    RATE_API_URL,
    RATE_CACHE_TTL_SECONDS,
    REQUEST_TIMEOUT,
)
from manga_price.errors import CurrencyUnsupported

logger = logging.getLogger(__name__)

# 取得失敗後、再取得を試みるまでの秒数
RETRY_INTERVAL = 300


class CurrencyConverter:
    """為替レートのキャッシュと換算."""

    def __init__(
        self,
        api_url: str = RATE_API_URL,
        ttl: float = RATE_CACHE_TTL_SECONDS,
        fallback_rates: dict[str, float] | None = None,
        rates: dict[str, float] | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """初期化.

        Args:
            api_url: USD 基準レートの取得先
            ttl: レートのキャッシュ秒数
            fallback_rates: 取得失敗時の固定レート表
            rates: 固定レート (指定時は API を呼ばない)
            session: requests.Session
            clock: 時刻関数 (テスト用に差し替え可)
        """
        self.api_url = api_url
        self.ttl = ttl
        self.fallback_rates = dict(fallback_rates or FALLBACK_RATES)
        self._pinned = rates is not None
        self._rates: dict[str, float] | None = dict(rates) if rates else None
        self._fetched_at = 0.0
        self._failed_at: float | None = None
        self._using_fallback = False
        self._session = session or requests.Session()
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def using_fallback(self) -> bool:
        return self._using_fallback

    def get_rates(self) -> dict[str, float]:
        """USD 基準のレート表を返す (ブロッキング)."""
        with self._lock:
            if self._pinned and self._rates is not None:
                return self._rates
            now = self._clock()
            if self._rates is not None and now - self._fetched_at < self.ttl:
                return self._rates
            if self._failed_at is not None and now - self._failed_at < RETRY_INTERVAL:
                return self._rates or self.fallback_rates

            try:
                rates = self._fetch_rates()
            except (requests.RequestException, ValueError) as e:
                logger.error("為替レート取得失敗: %s", e)
                self._failed_at = now
                if self._rates is not None:
                    logger.info("期限切れの為替レートキャッシュを使用")
                    return self._rates
                logger.info("固定為替レートを使用")
                self._using_fallback = True
                return self.fallback_rates

            self._rates = rates
            self._fetched_at = now
            self._failed_at = None
            self._using_fallback = False
            logger.info("為替レート更新: %d 通貨", len(rates))
            return rates

    def _fetch_rates(self) -> dict[str, float]:
        resp = self._session.get(self.api_url, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        data = resp.json()
        rates = data.get("rates") if isinstance(data, dict) else None
        if not rates:
            raise ValueError("Invalid exchange rate data format")
        return {str(code).upper(): float(rate) for code, rate in rates.items()}

    def convert_sync(self, amount: float, from_currency: str, to_currency: str) -> float:
        """金額を換算する. 小数点以下 2 桁に丸める.

        Raises:
            CurrencyUnsupported: どちらかの通貨のレートが無い
        """
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        if from_currency == to_currency:
            return amount

        rates = self.get_rates()
        if not rates.get(from_currency) or not rates.get(to_currency):
            raise CurrencyUnsupported(from_currency, to_currency)

        amount_in_usd = amount / rates[from_currency]
        return round(amount_in_usd * rates[to_currency], 2)

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        """convert_sync の非同期版. レート取得はワーカースレッドで行う."""
        return await asyncio.to_thread(self.convert_sync, amount, from_currency, to_currency)
