"""scrapers パッケージのユニットテスト."""

from unittest.mock import MagicMock
from urllib.parse import quote

import pytest
import requests
from bs4 import BeautifulSoup

from manga_price.errors import SourceFetchError, SourceParseError, SourceTimeout
from manga_price.scrapers.amazon import AmazonAdapter
from manga_price.scrapers.base import first_text, image_src, parse_price, select_first
from manga_price.scrapers.bookwalker import BookWalkerAdapter
from manga_price.scrapers.cmoa import CMoaAdapter
from manga_price.scrapers.ebookjapan import EBookJapanAdapter
from manga_price.scrapers.rakuten import RakutenAdapter
from manga_price.scrapers.registry import build_adapters
from manga_price.scrapers.rightstuf import RightStufAdapter


def _response(html: str, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = html
    resp.encoding = "utf-8"
    return resp


class TestParsePrice:
    """parse_price のテスト."""

    YEN = [r"¥\s*([\d,]+)", r"([\d,]+)\s*円"]

    def test_yen_sign(self):
        assert parse_price("￥1,234", self.YEN) == 1234

    def test_en_suffix(self):
        assert parse_price("価格: 616円(税込)", self.YEN) == 616

    def test_full_width_digits(self):
        assert parse_price("５２８円", self.YEN) == 528

    def test_dollar_with_cents(self):
        assert parse_price("$9.99", [r"\$\s*([\d,]+(?:\.\d+)?)"]) == 9.99

    def test_no_match(self):
        assert parse_price("価格未定", self.YEN) is None

    def test_empty(self):
        assert parse_price("", self.YEN) is None


class TestSelectorCascade:
    """セレクタの優先順探索のテスト."""

    HTML = '<div><p class="b">second</p><p class="c"> </p><img data-src="/x.jpg"></div>'

    def test_falls_through_to_later_selector(self):
        soup = BeautifulSoup(self.HTML, "html.parser")
        el = select_first(soup, [".a", ".b"])
        assert el is not None
        assert el.get_text() == "second"

    def test_no_match(self):
        soup = BeautifulSoup(self.HTML, "html.parser")
        assert select_first(soup, [".x", ".y"]) is None

    def test_first_text_skips_blank(self):
        soup = BeautifulSoup(self.HTML, "html.parser")
        assert first_text(soup, [".c", ".b"]) == "second"

    def test_broken_selector_is_skipped(self):
        soup = BeautifulSoup(self.HTML, "html.parser")
        el = select_first(soup, ["p[[[", ".b"])
        assert el is not None

    def test_image_lazy_attribute(self):
        soup = BeautifulSoup(self.HTML, "html.parser")
        assert image_src(soup.select_one("img")) == "/x.jpg"


class TestSearchUrl:
    """検索 URL 組み立てのテスト."""

    def test_amazon(self):
        url = AmazonAdapter().search_url("ワンピース")
        assert url == (
            "https://www.amazon.co.jp/s?k="
            + quote("ワンピース 漫画", safe="")
            + "&i=stripbooks"
        )

    def test_bookwalker(self):
        url = BookWalkerAdapter().search_url("ワンピース")
        assert url == "https://bookwalker.jp/search/?qcat=2&word=" + quote("ワンピース", safe="")

    def test_rightstuf(self):
        url = RightStufAdapter().search_url("One Piece")
        assert url == "https://www.rightstufanime.com/search?keywords=One%20Piece%20manga"

    def test_rakuten(self):
        url = RakutenAdapter().search_url("ナルト")
        assert url.startswith("https://books.rakuten.co.jp/search?")
        assert "g=001" in url
        assert url.endswith("w=" + quote("ナルト", safe=""))

    def test_ebookjapan(self):
        url = EBookJapanAdapter().search_url("A&B")
        assert url == "https://ebookjapan.yahoo.co.jp/search/?keyword=A%26B"

    def test_cmoa(self):
        url = CMoaAdapter().search_url("ワンピース")
        assert url.startswith("https://www.cmoa.jp/search/result/?category=0&search_word=")


class TestAmazonParse:
    """Amazon 検索結果のパース."""

    def test_skips_sponsored_result(self, load_fixture):
        item = AmazonAdapter().parse(load_fixture("amazon_search.html"), "ONE PIECE", "https://search")

        assert item is not None
        assert item.store == "Amazon"
        assert item.title == "ONE PIECE 105 (ジャンプコミックス)"
        assert item.price == 528
        assert item.currency == "JPY"
        assert item.url == "https://www.amazon.co.jp/dp/4088820000"
        assert item.image_url == "https://m.media-amazon.com/images/I/onepiece105.jpg"
        assert item.availability == "残り3点 ご注文はお早めに"
        assert item.is_digital is False
        assert item.is_estimated is False

    def test_only_sponsored_results(self):
        """広告しか無い場合は検索結果なし扱い."""
        html = (
            '<div data-component-type="s-search-result" class="s-result-item AdHolder">'
            '<h2><a href="/dp/B0SPONSOR1"><span>広告の商品</span></a></h2></div>'
        )
        assert AmazonAdapter().parse(html, "ONE PIECE", "https://search") is None

    def test_missing_fields_degrade(self, load_fixture):
        """価格・リンク・画像が無くても Item を返すこと."""
        item = AmazonAdapter().parse(
            load_fixture("amazon_search_no_price.html"), "ONE PIECE", "https://search"
        )

        assert item is not None
        assert item.title == "ONE PIECE 106"
        assert item.price == 616
        assert item.is_estimated is True
        assert item.url == "https://search"
        assert item.image_url is None
        assert item.availability == "在庫あり"


class TestStoreParse:
    """その他店舗の検索結果パース."""

    def test_bookwalker(self, load_fixture):
        item = BookWalkerAdapter().parse(load_fixture("bookwalker_search.html"), "ONE PIECE", "u")

        assert item.title == "ONE PIECE モノクロ版 105"
        assert item.price == 528
        assert item.url == "https://bookwalker.jp/de1234abcd-0000/"
        assert item.image_url == "https://c.bookwalker.jp/thumb/onepiece105.jpg"
        assert item.availability == "購入可能"
        assert item.is_digital is True
        assert item.is_estimated is False

    def test_rightstuf(self, load_fixture):
        item = RightStufAdapter().parse(load_fixture("rightstuf_search.html"), "One Piece", "u")

        assert item.title == "One Piece Manga Volume 105"
        assert item.price == 1009.99
        assert item.currency == "USD"
        assert item.url == "https://www.rightstufanime.com/One-Piece-Manga-Volume-105"
        assert item.image_url == "https://www.rightstufanime.com/images/op105.jpg"
        assert item.availability == "Out of Stock"

    def test_rakuten(self, load_fixture):
        item = RakutenAdapter().parse(load_fixture("rakuten_search.html"), "ONE PIECE", "u")

        assert item.price == 528
        assert item.url == "https://books.rakuten.co.jp/rb/17417186/"
        assert item.availability == "ご注文できない商品"
        assert item.is_estimated is False

    def test_ebookjapan_unparsable_price(self, load_fixture):
        item = EBookJapanAdapter().parse(load_fixture("ebookjapan_search.html"), "ONE PIECE", "u")

        assert item.title == "ONE PIECE モノクロ版 105巻"
        assert item.price == 550
        assert item.is_estimated is True
        assert item.url == "https://ebookjapan.yahoo.co.jp/books/123456/A001234567/"
        assert item.image_url == "https://cache2-ebookjapan.akamaized.net/op105.jpg"

    def test_cmoa_picks_matching_title(self, load_fixture):
        item = CMoaAdapter().parse(load_fixture("cmoa_search.html"), "ワンピース", "u")

        assert item.title == "ワンピース モノクロ版 105巻"
        assert item.price == 528
        assert item.url == "https://www.cmoa.jp/title/120001/"
        assert item.image_url == "https://www.cmoa.jp/data/image/title/op105.jpg"
        assert item.availability == "配信中"

    def test_cmoa_no_matching_title(self, load_fixture):
        assert CMoaAdapter().parse(load_fixture("cmoa_search.html"), "ドラゴンボール", "u") is None

    @pytest.mark.parametrize(
        "adapter_cls",
        [AmazonAdapter, BookWalkerAdapter, RightStufAdapter, RakutenAdapter, EBookJapanAdapter, CMoaAdapter],
    )
    def test_no_results(self, adapter_cls, load_fixture):
        """結果要素が無ければ None (例外ではない)."""
        assert adapter_cls().parse(load_fixture("no_results.html"), "ONE PIECE", "u") is None

    def test_empty_body(self):
        with pytest.raises(SourceParseError):
            BookWalkerAdapter().parse("   ", "ONE PIECE", "u")


class TestFetch:
    """HTTP 取得と例外変換のテスト."""

    def test_search_sends_browser_headers(self, load_fixture):
        session = MagicMock()
        session.get.return_value = _response(load_fixture("bookwalker_search.html"))
        adapter = BookWalkerAdapter(session=session, timeout=3)

        item = adapter.search("ONE PIECE")

        assert item.price == 528
        args, kwargs = session.get.call_args
        assert args[0] == adapter.search_url("ONE PIECE")
        assert kwargs["timeout"] == 3
        assert "Mozilla/5.0" in kwargs["headers"]["User-Agent"]
        assert kwargs["headers"]["Accept-Language"].startswith("ja")

    def test_rightstuf_english_first(self):
        assert RightStufAdapter().headers()["Accept-Language"].startswith("en")

    def test_timeout(self):
        session = MagicMock()
        session.get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(SourceTimeout) as exc_info:
            AmazonAdapter(session=session).search("ONE PIECE")
        assert exc_info.value.store == "Amazon"

    def test_http_error(self):
        session = MagicMock()
        resp = _response("")
        resp.raise_for_status.side_effect = requests.HTTPError(response=MagicMock(status_code=503))
        session.get.return_value = resp

        with pytest.raises(SourceFetchError, match="HTTP 503"):
            RakutenAdapter(session=session).search("ONE PIECE")

    def test_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(SourceFetchError):
            CMoaAdapter(session=session).search("ONE PIECE")


class TestBuildAdapters:
    """build_adapters のテスト."""

    def test_priority_order(self):
        adapters = build_adapters(enabled=["CMoa", "amazon", "RightStuf"], overrides_path="")
        assert [a.store for a in adapters] == ["Amazon", "RightStuf", "CMoa"]

    def test_unknown_store(self):
        with pytest.raises(KeyError):
            build_adapters(enabled=["Kinokuniya"], overrides_path="")

    def test_overrides_applied(self, tmp_path):
        path = tmp_path / "selectors.json"
        path.write_text('{"BookWalker": {"container": [".new-card"]}}', encoding="utf-8")

        adapters = build_adapters(enabled=["BookWalker"], overrides_path=str(path))
        item = adapters[0].parse(
            '<div class="new-card"><span class="price">400円</span></div>', "ワンピース", "u"
        )

        assert item.price == 400
        assert item.title == "ワンピース"
