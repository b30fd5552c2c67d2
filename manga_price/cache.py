"""検索結果のインメモリキャッシュ.

TTL 内のエントリのみヒット扱い。上限件数を超えたら書き込み時刻の
古い順にまとめて削除する（読み取りでは順序を更新しない）。
プロセス再起動で消える。
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from manga_price.config import CACHE_EVICT_COUNT, CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS
from manga_price.models import AggregateResult, CacheEntry

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str]


class ResultCache:
    """(title, currency) をキーに AggregateResult を保持する."""

    def __init__(
        self,
        ttl: float = CACHE_TTL_SECONDS,
        max_entries: int = CACHE_MAX_ENTRIES,
        evict_count: int = CACHE_EVICT_COUNT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1 or evict_count < 1:
            raise ValueError("max_entries and evict_count must be positive")
        self.ttl = ttl
        self.max_entries = max_entries
        self.evict_count = evict_count
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: CacheKey) -> AggregateResult | None:
        """有効期限内ならキャッシュ値を返す. 期限切れは削除して None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp < self.ttl:
                return entry.data
            del self._entries[key]
        logger.debug("キャッシュ期限切れ: key=%s", key)
        return None

    def put(self, key: CacheKey, value: AggregateResult) -> None:
        """値を保存し、上限超過なら古いエントリを削除する."""
        with self._lock:
            # 再書き込みは挿入順も更新する
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(key=key, data=value, timestamp=self._clock())
        self.evict_if_oversize()

    def evict_if_oversize(self) -> list[CacheKey]:
        """上限件数を超えていれば古い順に evict_count 件削除する.

        Returns:
            削除したキーのリスト
        """
        with self._lock:
            if len(self._entries) <= self.max_entries:
                return []
            oldest = sorted(self._entries.values(), key=lambda e: e.timestamp)
            evicted = [e.key for e in oldest[: self.evict_count]]
            for key in evicted:
                del self._entries[key]
        logger.info("キャッシュ削除: %d 件 (残り %d 件)", len(evicted), len(self))
        return evicted

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
