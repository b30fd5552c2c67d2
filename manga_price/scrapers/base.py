"""店舗スクレイパーの共通処理.

取得戦略:
  1. 店舗ごとの検索 URL を組み立てて HTML を取得
  2. 結果要素をセレクタの優先順リストで探索（最初にヒットしたものを採用）
  3. タイトル・価格・URL・画像・在庫をフィールドごとに独立して抽出
     （1フィールドの欠落で他のフィールドの抽出を止めない）
  4. 価格が読めなければ店舗の推定価格で補い is_estimated を立てる
"""

from __future__ import annotations

import logging
import re
import unicodedata
from urllib.parse import quote, urlencode, urljoin

import requests
from bs4 import BeautifulSoup, Tag

from manga_price.config import (
    ACCEPT_HEADER,
    ACCEPT_LANGUAGE_JA,
    REQUEST_TIMEOUT,
    USER_AGENT,
)
from manga_price.errors import SourceFetchError, SourceParseError, SourceTimeout
from manga_price.models import Item
from manga_price.selector_config import DEFAULT_SELECTORS
from manga_price.stores import StoreProfile

logger = logging.getLogger(__name__)

_IMAGE_ATTRS = ("data-srcset", "srcset", "data-src", "data-original", "src")


def normalize_text(s: str | None) -> str:
    """空白を詰めて前後を除去する."""
    if not s:
        return ""
    return re.sub(r"\s+", " ", s.strip())


def select_first(root: Tag, selectors: list[str]) -> Tag | None:
    """セレクタを順に試して最初に見つかった要素を返す."""
    for sel in selectors:
        try:
            el = root.select_one(sel)
        except Exception as e:
            # 上書き設定の壊れたセレクタで抽出全体を止めない
            logger.warning("セレクタ評価失敗: selector=%s, error=%s", sel, e)
            continue
        if el is not None:
            return el
    return None


def select_all(root: Tag, selectors: list[str]) -> list[Tag]:
    """最初に1件以上ヒットしたセレクタの全要素を返す."""
    for sel in selectors:
        try:
            els = root.select(sel)
        except Exception as e:
            logger.warning("セレクタ評価失敗: selector=%s, error=%s", sel, e)
            continue
        if els:
            return els
    return []


def first_text(root: Tag, selectors: list[str]) -> str:
    """セレクタを順に試して最初の空でないテキストを返す."""
    for sel in selectors:
        el = select_first(root, [sel])
        if el is None:
            continue
        text = normalize_text(el.get_text(" "))
        if text:
            return text
    return ""


def first_href(root: Tag, selectors: list[str]) -> str:
    """セレクタを順に試して最初の href を返す."""
    for sel in selectors:
        el = select_first(root, [sel])
        if el is None:
            continue
        href = el.get("href")
        if href:
            return str(href).strip()
    return ""


def image_src(el: Tag | None) -> str:
    """遅延読み込み属性も考慮して画像 URL を取り出す."""
    if el is None:
        return ""
    for attr in _IMAGE_ATTRS:
        value = el.get(attr)
        if not value:
            continue
        value = str(value).strip()
        if attr.endswith("srcset"):
            # "url 1x, url 2x" の先頭候補
            value = value.split(",")[0].strip().split(" ")[0]
        if value and not value.startswith("data:"):
            return value
    return ""


def parse_price(text: str, patterns: list[str]) -> float | None:
    """価格テキストをパターン順に照合して数値にする.

    Returns:
        価格。どのパターンにも一致しなければ None。
    """
    if not text:
        return None
    normalized = unicodedata.normalize("NFKC", text)
    for pattern in patterns:
        m = re.search(pattern, normalized)
        if not m:
            continue
        raw = m.group(1).replace(",", "")
        try:
            value = float(raw)
        except ValueError:
            continue
        if value < 0:
            continue
        return int(value) if value.is_integer() else value
    return None


class SourceAdapter:
    """1店舗分の検索・抽出を行う基底クラス.

    サブクラスは profile と search_params / search_path を定義する。
    """

    profile: StoreProfile
    search_path: str = ""
    accept_language: str = ACCEPT_LANGUAGE_JA

    def __init__(
        self,
        selectors: dict[str, list[str]] | None = None,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.selectors = selectors or DEFAULT_SELECTORS[self.profile.name]
        self.session = session or requests.Session()
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"<{type(self).__name__} store={self.store}>"

    @property
    def store(self) -> str:
        return self.profile.name

    def search_params(self, title: str) -> dict[str, str]:
        raise NotImplementedError

    def search_url(self, title: str) -> str:
        """タイトルを URL エンコードして検索 URL を組み立てる."""
        query = urlencode(self.search_params(title), quote_via=quote)
        return f"{self.profile.base_url}{self.search_path}?{query}"

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": USER_AGENT,
            "Accept": ACCEPT_HEADER,
            "Accept-Language": self.accept_language,
        }

    def search(self, title: str) -> Item | None:
        """タイトルで検索し、先頭の1件を返す.

        Returns:
            正規化済み Item。検索結果が無ければ None。

        Raises:
            SourceFetchError: ネットワーク障害・非 2xx
            SourceTimeout: タイムアウト
            SourceParseError: HTML として解析できない
        """
        url = self.search_url(title)
        logger.info("%s で「%s」を検索中: %s", self.store, title, url)
        html = self.fetch(url)
        item = self.parse(html, title, url)
        if item is None:
            logger.info("%s: 検索結果なし (title=%s)", self.store, title)
        return item

    def fetch(self, url: str) -> str:
        """検索ページの HTML を取得する."""
        try:
            resp = self.session.get(url, headers=self.headers(), timeout=self.timeout)
            resp.raise_for_status()
        except requests.Timeout as e:
            raise SourceTimeout(self.store, f"request timed out: {e}") from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise SourceFetchError(self.store, f"HTTP {status}") from e
        except requests.RequestException as e:
            raise SourceFetchError(self.store, f"request failed: {e}") from e

        # 文字コード未指定時 requests は ISO-8859-1 とみなすため推定値で上書き
        if resp.encoding is None or resp.encoding.lower() == "iso-8859-1":
            resp.encoding = resp.apparent_encoding
        return resp.text

    def parse(self, html: str, title: str, search_url: str) -> Item | None:
        """検索結果 HTML から先頭の商品を Item にする."""
        if not html or not html.strip():
            raise SourceParseError(self.store, "empty response body")
        try:
            soup = BeautifulSoup(html, "html.parser")
        except Exception as e:
            raise SourceParseError(self.store, f"unparsable markup: {e}") from e

        result = self.find_result(soup, title)
        if result is None:
            return None
        return self.build_item(result, title, search_url)

    def find_result(self, soup: BeautifulSoup, title: str) -> Tag | None:
        """先頭の検索結果要素を探す."""
        return select_first(soup, self.selectors["container"])

    def build_item(self, result: Tag, title: str, search_url: str) -> Item:
        """結果要素から各フィールドを独立に抽出する."""
        item_title = first_text(result, self.selectors["title"]) or title

        price_text = first_text(result, self.selectors["price"])
        price = parse_price(price_text, self.selectors["price_patterns"])
        estimated = price is None
        if estimated:
            logger.warning(
                "%s: 価格を読み取れないため推定価格を使用 (text=%r)", self.store, price_text
            )
            price = self.profile.default_price

        href = first_href(result, self.selectors["link"])
        url = self.absolute_url(href) if href else search_url

        image = image_src(select_first(result, self.selectors["image"]))
        image_url = self.absolute_url(image) if image else None

        availability = (
            first_text(result, self.selectors["availability"])
            or self.profile.default_availability
        )

        return Item(
            store=self.store,
            title=item_title,
            price=price,
            currency=self.profile.currency,
            url=url,
            image_url=image_url,
            availability=availability,
            is_digital=self.profile.is_digital,
            is_estimated=estimated,
        )

    def absolute_url(self, href: str) -> str:
        if href.startswith("//"):
            return "https:" + href
        return urljoin(self.profile.base_url + "/", href)
