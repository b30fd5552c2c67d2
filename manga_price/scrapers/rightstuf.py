"""RightStufAnime の検索結果スクレイパー. 価格は USD."""

from __future__ import annotations

from manga_price.config import ACCEPT_LANGUAGE_EN
from manga_price.scrapers.base import SourceAdapter
from manga_price.stores import RIGHTSTUF


class RightStufAdapter(SourceAdapter):
    profile = RIGHTSTUF
    search_path = "/search"
    accept_language = ACCEPT_LANGUAGE_EN

    def search_params(self, title: str) -> dict[str, str]:
        return {"keywords": f"{title} manga"}
