"""Amazon.co.jp の検索結果スクレイパー."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from manga_price.scrapers.base import SourceAdapter, select_all
from manga_price.stores import AMAZON


class AmazonAdapter(SourceAdapter):
    """Amazon の書籍カテゴリ (stripbooks) で漫画を検索する."""

    profile = AMAZON
    search_path = "/s"

    def search_params(self, title: str) -> dict[str, str]:
        return {"k": f"{title} 漫画", "i": "stripbooks"}

    def find_result(self, soup: BeautifulSoup, title: str) -> Tag | None:
        """スポンサー枠 (AdHolder) を飛ばして先頭の結果を返す. 広告しか無ければ None."""
        for el in select_all(soup, self.selectors["container"]):
            if "AdHolder" not in (el.get("class") or []):
                return el
        return None
