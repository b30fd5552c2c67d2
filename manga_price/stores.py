"""店舗ごとの固定プロファイル.

並び順 (STORE_ORDER) が集約結果の出力順になる。
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StoreProfile:
    """店舗の固定情報 (通貨・推定価格・URL 形式など)."""

    name: str
    base_url: str
    currency: str
    is_digital: bool
    default_price: float  # 価格が取れない場合の推定価格
    default_availability: str
    mock_url_template: str  # {id} にカタログ ID が入る
    mock_id_digits: int
    placeholder_image: str


AMAZON = StoreProfile(
    name="Amazon",
    base_url="https://www.amazon.co.jp",
    currency="JPY",
    is_digital=False,
    default_price=616,
    default_availability="在庫あり",
    mock_url_template="https://www.amazon.co.jp/dp/B0{id}",
    mock_id_digits=8,
    placeholder_image="https://m.media-amazon.com/images/I/placeholder-image.jpg",
)

BOOKWALKER = StoreProfile(
    name="BookWalker",
    base_url="https://bookwalker.jp",
    currency="JPY",
    is_digital=True,
    default_price=460,
    default_availability="購入可能",
    mock_url_template="https://bookwalker.jp/de{id}/",
    mock_id_digits=8,
    placeholder_image="https://c.bookwalker.jp/placeholder-image.jpg",
)

RIGHTSTUF = StoreProfile(
    name="RightStuf",
    base_url="https://www.rightstufanime.com",
    currency="USD",
    is_digital=False,
    default_price=9.99,
    default_availability="In Stock",
    mock_url_template="https://www.rightstufanime.com/product/{id}",
    mock_id_digits=6,
    placeholder_image="https://www.rightstufanime.com/images/placeholder-image.jpg",
)

RAKUTEN = StoreProfile(
    name="Rakuten",
    base_url="https://books.rakuten.co.jp",
    currency="JPY",
    is_digital=False,
    default_price=693,
    default_availability="在庫あり",
    mock_url_template="https://books.rakuten.co.jp/rb/{id}/",
    mock_id_digits=8,
    placeholder_image="https://thumbnail.image.rakuten.co.jp/placeholder-image.jpg",
)

EBOOKJAPAN = StoreProfile(
    name="eBookJapan",
    base_url="https://ebookjapan.yahoo.co.jp",
    currency="JPY",
    is_digital=True,
    default_price=550,
    default_availability="購入可能",
    mock_url_template="https://ebookjapan.yahoo.co.jp/books/detail/{id}/",
    mock_id_digits=6,
    placeholder_image="https://ebookjapan.yahoo.co.jp/assets/images/placeholder-image.jpg",
)

CMOA = StoreProfile(
    name="CMoa",
    base_url="https://www.cmoa.jp",
    currency="JPY",
    is_digital=True,
    default_price=495,
    default_availability="配信中",
    mock_url_template="https://www.cmoa.jp/title/{id}/",
    mock_id_digits=6,
    placeholder_image="https://www.cmoa.jp/data/image/placeholder-image.jpg",
)

STORE_ORDER: list[StoreProfile] = [AMAZON, BOOKWALKER, RIGHTSTUF, RAKUTEN, EBOOKJAPAN, CMOA]

PROFILES: dict[str, StoreProfile] = {p.name: p for p in STORE_ORDER}


def get_profile(store: str) -> StoreProfile:
    """店舗名からプロファイルを取得する. 大文字小文字は区別しない."""
    for name, profile in PROFILES.items():
        if name.lower() == store.lower():
            return profile
    raise KeyError(f"Unknown store: {store}")


def store_rank(store: str) -> int:
    """出力順の優先度 (小さいほど先)."""
    return STORE_ORDER.index(get_profile(store))
