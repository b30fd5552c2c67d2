"""ebookjapan の検索結果スクレイパー."""

from __future__ import annotations

from manga_price.scrapers.base import SourceAdapter
from manga_price.stores import EBOOKJAPAN


class EBookJapanAdapter(SourceAdapter):
    profile = EBOOKJAPAN
    search_path = "/search/"

    def search_params(self, title: str) -> dict[str, str]:
        return {"keyword": title}
