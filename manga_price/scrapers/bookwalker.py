"""BookWalker の検索結果スクレイパー."""

from __future__ import annotations

from manga_price.scrapers.base import SourceAdapter
from manga_price.stores import BOOKWALKER


class BookWalkerAdapter(SourceAdapter):
    """BookWalker のマンガカテゴリ (qcat=2) で検索する."""

    profile = BOOKWALKER
    search_path = "/search/"

    def search_params(self, title: str) -> dict[str, str]:
        return {"qcat": "2", "word": title}
