"""コミックシーモアの検索結果スクレイパー."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from manga_price.scrapers.base import SourceAdapter, first_text, select_all
from manga_price.stores import CMOA

logger = logging.getLogger(__name__)

# 先頭から何件までタイトル照合するか
MAX_CANDIDATES = 5


class CMoaAdapter(SourceAdapter):
    """コミックシーモアで検索する.

    検索語と無関係な作品が上位に出るため、タイトルが検索語を含む
    (または検索語に含まれる) 最初の結果を採用する。
    """

    profile = CMOA
    search_path = "/search/result/"

    def search_params(self, title: str) -> dict[str, str]:
        return {"category": "0", "search_word": title}

    def find_result(self, soup: BeautifulSoup, title: str) -> Tag | None:
        candidates = select_all(soup, self.selectors["container"])[:MAX_CANDIDATES]
        for el in candidates:
            found = first_text(el, self.selectors["title"])
            if not found:
                continue
            if title in found or found in title:
                return el
        if candidates:
            logger.info("CMoa: 検索語に一致するタイトルなし (候補 %d 件)", len(candidates))
        return None
