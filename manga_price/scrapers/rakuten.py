"""楽天ブックスの検索結果スクレイパー."""

from __future__ import annotations

from manga_price.scrapers.base import SourceAdapter
from manga_price.stores import RAKUTEN


class RakutenAdapter(SourceAdapter):
    """楽天ブックスの本ジャンル (g=001) で検索する."""

    profile = RAKUTEN
    search_path = "/search"

    def search_params(self, title: str) -> dict[str, str]:
        return {
            "sty": "1",
            "g": "001",
            "v": "2",
            "s": "1",
            "p": "1",
            "ps": "30",
            "w": title,
        }
