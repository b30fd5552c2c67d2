"""店舗ごとのセレクタ・価格パターン定義.

各フィールドは優先順のセレクタリストで、先頭から順に試して最初に
ヒットしたものを採用する。マークアップ変更時はコードを触らず
SELECTOR_OVERRIDES_PATH の JSON で差し替えられる。

JSON 形式:
    {"Amazon": {"price": [".a-price .a-offscreen"], "price_patterns": ["¥([\\d,]+)"]}}
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

FIELDS = ("container", "title", "price", "link", "image", "availability", "price_patterns")

# 価格テキストは NFKC 正規化後 (全角 ￥ → ¥, 全角数字 → 半角) に照合する
_YEN_PATTERNS = [
    r"¥\s*([\d,]+)",
    r"([\d,]+)\s*円",
    r"^\s*([\d,]+)\s*$",
]

DEFAULT_SELECTORS: dict[str, dict[str, list[str]]] = {
    "Amazon": {
        "container": [
            "div[data-component-type='s-search-result']",
            "div.s-result-item[data-asin]",
            ".s-main-slot .s-widget-container",
        ],
        "title": [
            "h2 a span",
            "h2 span",
            ".a-size-medium.a-text-normal",
            ".a-size-base-plus.a-text-normal",
        ],
        "price": [
            ".a-price .a-offscreen",
            ".a-price-whole",
            ".a-color-price",
        ],
        "link": [
            "h2 a",
            "a.a-link-normal.s-no-outline",
            "a.a-link-normal",
        ],
        "image": ["img.s-image", "img"],
        "availability": [
            ".a-color-success",
            ".a-size-base.a-color-price",
        ],
        "price_patterns": _YEN_PATTERNS,
    },
    "BookWalker": {
        "container": [".o-tile", ".m-book-item", ".bookitem"],
        "title": [
            ".o-tile-book-info__title a",
            ".m-book-item__title",
            ".book-title",
        ],
        "price": [
            ".m-book-item__price-num",
            ".o-tile-book-info__price",
            ".price",
        ],
        "link": [
            ".o-tile-book-info__title a",
            "a.a-link",
            "a[href]",
        ],
        "image": [".o-tile-thumb-box img", ".book-img img", "img"],
        "availability": [".o-tile-book-info__status"],
        "price_patterns": _YEN_PATTERNS,
    },
    "RightStuf": {
        "container": [".product-item", ".facets-item-cell-grid", "[data-type='item']"],
        "title": [
            ".product-item-title",
            ".facets-item-cell-grid-title span",
            ".facets-item-cell-grid-title",
        ],
        "price": [
            ".product-item-price .price-sales",
            ".product-views-price-lead",
            ".price",
        ],
        "link": [
            ".product-item-thumbnail a",
            "a.facets-item-cell-grid-link-image",
            "a[href]",
        ],
        "image": [
            ".product-item-thumbnail img",
            "img.facets-item-cell-grid-image",
            "img",
        ],
        "availability": [
            ".product-line-stock-msg-in",
            ".product-line-stock-msg-out",
            ".stock-status",
        ],
        "price_patterns": [
            r"\$\s*([\d,]+(?:\.\d+)?)",
            r"^\s*([\d,]+\.\d{2})\s*$",
        ],
    },
    "Rakuten": {
        "container": [
            ".rbcomp__item-list__item",
            ".rbcomp__item",
            "div.item",
        ],
        "title": [
            ".rbcomp__item-list__item__title a",
            ".title a",
            ".item-title",
        ],
        "price": [
            ".rbcomp__item-list__item__price",
            ".price",
        ],
        "link": [
            ".rbcomp__item-list__item__title a",
            ".title a",
            "a[href]",
        ],
        "image": [
            ".rbcomp__item-list__item__image img",
            ".image img",
            "img",
        ],
        "availability": [
            ".rbcomp__item-list__item__stock",
            ".status",
        ],
        "price_patterns": _YEN_PATTERNS,
    },
    "eBookJapan": {
        "container": [".book-item", "li.contents-item", ".search-result-item"],
        "title": [
            ".book-item__title",
            ".contents-item__title",
            ".title",
        ],
        "price": [".book-item__price", ".contents-item__price", ".price"],
        "link": ["a.book-item__link", "a[href]"],
        "image": [".book-item__image img", "img"],
        "availability": [".book-item__status"],
        "price_patterns": _YEN_PATTERNS,
    },
    "CMoa": {
        "container": [".search_result_box li", ".data", ".title_list li"],
        "title": [".title a", ".title_name a", ".title"],
        "price": [".price", ".price_box"],
        "link": [".title a", ".title_name a", "a[href]"],
        "image": [".data__image img", ".thum_img img", "img"],
        "availability": [".status"],
        "price_patterns": _YEN_PATTERNS,
    },
}


def load_selectors(overrides_path: str | Path | None = None) -> dict[str, dict[str, list[str]]]:
    """既定セレクタに JSON の上書きをマージして返す.

    Args:
        overrides_path: 上書き JSON のパス。空なら既定値のみ。

    Returns:
        店舗名 -> フィールド名 -> セレクタリスト
    """
    selectors = copy.deepcopy(DEFAULT_SELECTORS)
    if not overrides_path:
        return selectors

    path = Path(overrides_path)
    try:
        overrides = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error("セレクタ上書きファイルの読み込み失敗: path=%s, error=%s", path, e)
        return selectors

    if not isinstance(overrides, dict):
        logger.error("セレクタ上書きファイルの形式が不正 (オブジェクトではない): path=%s", path)
        return selectors

    for store, fields in overrides.items():
        if store not in selectors:
            logger.warning("未知の店舗のセレクタ上書きを無視: %s", store)
            continue
        if not isinstance(fields, dict):
            logger.warning("不正なセレクタ上書きを無視: store=%s", store)
            continue
        for field_name, values in fields.items():
            if field_name not in FIELDS or not isinstance(values, list):
                logger.warning("不正なセレクタ上書きを無視: store=%s, field=%s", store, field_name)
                continue
            selectors[store][field_name] = [str(v) for v in values]
        logger.info("セレクタ上書き適用: store=%s, fields=%s", store, sorted(fields))

    return selectors
