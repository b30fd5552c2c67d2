"""全店舗の検索を並列実行して結果を集約する.

処理フロー:
  1. タイトル検証
  2. (title, currency) でキャッシュ照会
  3. 全店舗を並列検索（店舗ごとにタイムアウト。全件の完了を待つ）
  4. 0件・失敗・タイムアウトの店舗はモックで補完
  5. 要求通貨への換算
  6. キャッシュへ保存
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from manga_price.cache import ResultCache
from manga_price.config import (
    AGGREGATE_TIMEOUT,
    DEFAULT_CURRENCY,
    SEARCH_WORKERS,
    SOURCE_TIMEOUT,
)
from manga_price.currency import CurrencyConverter
from manga_price.errors import CurrencyUnsupported, InternalFault, SourceError, SourceTimeout
from manga_price.mock import MockGenerator
from manga_price.models import AggregateResult, Item, PartialError, SearchRequest
from manga_price.scrapers.base import SourceAdapter

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Aggregator:
    """店舗アダプタ群の検索結果を1つの AggregateResult にまとめる."""

    def __init__(
        self,
        adapters: list[SourceAdapter],
        cache: ResultCache,
        converter: CurrencyConverter,
        mock: MockGenerator | None = None,
        source_timeout: float = SOURCE_TIMEOUT,
        aggregate_timeout: float = AGGREGATE_TIMEOUT,
        max_workers: int = SEARCH_WORKERS,
    ) -> None:
        """初期化.

        Args:
            adapters: 店舗優先順に並んだアダプタ
            cache: 検索結果キャッシュ
            converter: 通貨換算
            mock: モック生成器
            source_timeout: 店舗ごとの期限 (秒)
            aggregate_timeout: 全体の期限 (秒)。0 以下で無効。有効なら source_timeout より長いこと。
            max_workers: 店舗検索用スレッド数。店舗数未満なら店舗数に切り上げる。

        Raises:
            ValueError: aggregate_timeout が source_timeout 以下
        """
        if 0 < aggregate_timeout <= source_timeout:
            raise ValueError(
                f"aggregate_timeout ({aggregate_timeout:g}s) must exceed "
                f"source_timeout ({source_timeout:g}s)"
            )
        self.adapters = adapters
        self.cache = cache
        self.converter = converter
        self.mock = mock or MockGenerator()
        self.source_timeout = source_timeout
        self.aggregate_timeout = aggregate_timeout
        self.max_workers = max(max_workers, len(adapters))
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="store-search"
        )

    def close(self) -> None:
        """検索スレッドを待たずにプールを閉じる. 期限切れで放置中の取得は完了まで走る."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    @property
    def stores(self) -> list[str]:
        return [a.store for a in self.adapters]

    async def aggregate(
        self,
        title: str,
        currency: str = DEFAULT_CURRENCY,
        *,
        force_mock: bool = False,
    ) -> AggregateResult:
        """全店舗を検索して集約結果を返す.

        Raises:
            InvalidRequest: タイトルが空
            InternalFault: 結果の件数が店舗数と一致しない
        """
        request = SearchRequest(title=title, currency=currency, mock=force_mock)
        return await self.search(request)

    async def search(self, request: SearchRequest) -> AggregateResult:
        key = request.cache_key
        if not request.mock:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("キャッシュヒット: title=%s, currency=%s", *key)
                return cached

        logger.info("検索開始: title=%s, currency=%s, mock=%s", *key, request.mock)
        if request.mock:
            items = self.mock.generate_all(request.title, self.stores)
            errors: list[PartialError] = []
            used_mock = True
        else:
            items, errors, used_mock = await self._collect(request.title)

        if len(items) != len(self.adapters):
            raise InternalFault(
                f"item count {len(items)} does not match store count {len(self.adapters)}"
            )

        items = await self._convert_all(items, request.currency)
        result = AggregateResult(
            title=request.title,
            timestamp=_now_iso(),
            requested_currency=request.currency,
            items=tuple(items),
            used_mock_data=used_mock,
            partial_errors=tuple(errors),
        )

        # 強制モックの結果は実データのキャッシュを汚さないよう保存しない
        if not request.mock:
            self.cache.put(key, result)
        logger.info(
            "検索完了: title=%s, 店舗=%d, エラー=%d, モックのみ=%s",
            request.title, len(items), len(errors), used_mock,
        )
        return result

    async def _collect(self, title: str) -> tuple[list[Item], list[PartialError], bool]:
        """全店舗を並列検索し、失敗分をモックで補う."""
        fan_out = asyncio.gather(
            *(self._search_one(adapter, title) for adapter in self.adapters),
            return_exceptions=True,
        )
        try:
            if self.aggregate_timeout > 0:
                outcomes = await asyncio.wait_for(fan_out, timeout=self.aggregate_timeout)
            else:
                outcomes = await fan_out
        except asyncio.TimeoutError:
            logger.error("全体タイムアウト (%.1f 秒)。全店舗をモックで返す", self.aggregate_timeout)
            return self._all_timed_out(title)

        items: list[Item] = []
        errors: list[PartialError] = []
        live_count = 0
        for adapter, outcome in zip(self.adapters, outcomes):
            if isinstance(outcome, Item):
                items.append(outcome)
                live_count += 1
                continue
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning("%s: 検索失敗のためモックで補完: %s", adapter.store, outcome)
                errors.append(PartialError.from_exception(adapter.store, outcome))
            items.append(self.mock.generate(title, adapter.store))

        return items, errors, live_count == 0

    def _all_timed_out(self, title: str) -> tuple[list[Item], list[PartialError], bool]:
        items = self.mock.generate_all(title, self.stores)
        errors = [
            PartialError.from_exception(store, SourceTimeout(store, "aggregate deadline exceeded"))
            for store in self.stores
        ]
        return items, errors, True

    async def _search_one(self, adapter: SourceAdapter, title: str) -> Item | None:
        """1店舗分の検索. 期限切れは SourceTimeout にする.

        スレッド上の requests 呼び出しは打ち切れないため、期限後は結果を待たずに放置する。
        専用プールで実行するので asyncio.run の終了処理もこのスレッドを待たない。
        """
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, adapter.search, title),
                timeout=self.source_timeout,
            )
        except asyncio.TimeoutError as e:
            raise SourceTimeout(
                adapter.store, f"no response within {self.source_timeout:g}s"
            ) from e
        except SourceError:
            raise
        except Exception as e:
            logger.exception("%s: 想定外のスクレイピングエラー", adapter.store)
            raise SourceError(adapter.store, f"unexpected error: {e}") from e

    async def _convert_all(self, items: list[Item], currency: str) -> list[Item]:
        converted: list[Item] = []
        for item in items:
            if item.currency == currency:
                converted.append(item)
                continue
            try:
                price = await self.converter.convert(item.price, item.currency, currency)
            except CurrencyUnsupported as e:
                logger.warning("%s: 通貨換算不可のため元の通貨のまま返す: %s", item.store, e)
                converted.append(item)
                continue
            converted.append(item.converted(price, currency))
        return converted
