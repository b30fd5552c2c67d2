"""データモデル定義."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from manga_price.config import DEFAULT_CURRENCY
from manga_price.errors import InvalidRequest


@dataclass(frozen=True)
class Item:
    """1店舗・1タイトル分の正規化済み価格情報."""

    store: str  # 店舗名 (例: Amazon)
    title: str  # 表示タイトル
    price: float  # 数値価格 (整形済み文字列ではない)
    currency: str  # 通貨コード (例: JPY)
    url: str  # 商品 URL。取れなければ検索結果 URL
    image_url: str | None = None
    availability: str | None = None  # 店舗ごとの在庫・購入可否表記をそのまま保持
    is_digital: bool = False
    is_estimated: bool = False  # モック生成 or 価格パース失敗
    original_price: float | None = None  # 通貨換算時のみ
    original_currency: str | None = None

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"price must be non-negative: {self.price}")

    def converted(self, price: float, currency: str) -> Item:
        """換算後の Item を返す. 換算前の値は original_* に残す."""
        return replace(
            self,
            price=price,
            currency=currency,
            original_price=self.price,
            original_currency=self.currency,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "store": self.store,
            "title": self.title,
            "price": self.price,
            "currency": self.currency,
            "url": self.url,
            "imageUrl": self.image_url,
            "availability": self.availability,
            "isDigital": self.is_digital,
            "isEstimated": self.is_estimated,
        }
        if self.original_price is not None:
            data["originalPrice"] = self.original_price
            data["originalCurrency"] = self.original_currency
        return data


@dataclass(frozen=True)
class SearchRequest:
    """検索リクエスト. リクエストごとに生成し永続化しない."""

    title: str
    currency: str = DEFAULT_CURRENCY
    mock: bool = False

    def __post_init__(self) -> None:
        title = (self.title or "").strip()
        if not title:
            raise InvalidRequest("Missing title parameter")
        object.__setattr__(self, "title", title)
        object.__setattr__(self, "currency", (self.currency or DEFAULT_CURRENCY).strip().upper())

    @property
    def cache_key(self) -> tuple[str, str]:
        return (self.title, self.currency)


@dataclass(frozen=True)
class PartialError:
    """店舗単位の失敗理由."""

    store: str
    error: str

    @classmethod
    def from_exception(cls, store: str, exc: Exception) -> PartialError:
        """例外クラス名付きのメッセージにする (例: "SourceTimeout: ...")."""
        message = getattr(exc, "message", None) or str(exc)
        return cls(store=store, error=f"{type(exc).__name__}: {message}")

    def to_dict(self) -> dict[str, str]:
        return {"store": self.store, "error": self.error}


@dataclass(frozen=True)
class AggregateResult:
    """全店舗の集約結果. 生成後は変更しない."""

    title: str
    timestamp: str  # ISO 8601
    requested_currency: str
    items: tuple[Item, ...]
    used_mock_data: bool
    partial_errors: tuple[PartialError, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "timestamp": self.timestamp,
            "requestedCurrency": self.requested_currency,
            "stores": [item.to_dict() for item in self.items],
            "usedMockData": self.used_mock_data,
            "partialErrors": [e.to_dict() for e in self.partial_errors],
        }


@dataclass
class CacheEntry:
    """キャッシュのエントリ. ResultCache のみが所有する."""

    key: tuple[str, str]
    data: AggregateResult
    timestamp: float = field(default=0.0)  # 書き込み時刻 (clock の値)
