"""テスト共通のフィクスチャ."""

from __future__ import annotations

import time
from pathlib import Path

import pytest

from manga_price.aggregator import Aggregator
from manga_price.cache import ResultCache
from manga_price.currency import CurrencyConverter
from manga_price.mock import MockGenerator
from manga_price.stores import STORE_ORDER

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# 既知のレート (USD 基準)
TEST_RATES = {"USD": 1.0, "JPY": 150.27, "EUR": 0.92}


class FakeClock:
    """手動で進める時計."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAdapter:
    """ネットワークを使わない店舗アダプタ."""

    def __init__(self, store, result=None, error=None, delay=0.0):
        self.store = store
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = 0

    def search(self, title):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def load_fixture():
    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def converter():
    return CurrencyConverter(rates=TEST_RATES)


@pytest.fixture
def fake_adapters():
    """全店舗分の「検索結果なし」アダプタ (店舗優先順)."""
    return [FakeAdapter(p.name) for p in STORE_ORDER]


@pytest.fixture
def make_aggregator(clock, converter):
    def _make(adapters, **kwargs):
        kwargs.setdefault("source_timeout", 5.0)
        kwargs.setdefault("aggregate_timeout", 0)
        cache = kwargs.pop("cache", None)
        return Aggregator(
            adapters=adapters,
            cache=ResultCache(clock=clock) if cache is None else cache,
            converter=converter,
            mock=MockGenerator(),
            **kwargs,
        )

    return _make


@pytest.fixture
def adapter_factory():
    """FakeAdapter を生成する関数."""
    return FakeAdapter
