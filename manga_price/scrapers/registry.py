"""店舗アダプタの生成."""

from __future__ import annotations

import logging

import requests

from manga_price.config import ENABLED_STORES, SELECTOR_OVERRIDES_PATH
from manga_price.scrapers.amazon import AmazonAdapter
from manga_price.scrapers.base import SourceAdapter
from manga_price.scrapers.bookwalker import BookWalkerAdapter
from manga_price.scrapers.cmoa import CMoaAdapter
from manga_price.scrapers.ebookjapan import EBookJapanAdapter
from manga_price.scrapers.rakuten import RakutenAdapter
from manga_price.scrapers.rightstuf import RightStufAdapter
from manga_price.selector_config import load_selectors
from manga_price.stores import STORE_ORDER, get_profile

logger = logging.getLogger(__name__)

ADAPTER_CLASSES: dict[str, type[SourceAdapter]] = {
    cls.profile.name: cls
    for cls in (
        AmazonAdapter,
        BookWalkerAdapter,
        RightStufAdapter,
        RakutenAdapter,
        EBookJapanAdapter,
        CMoaAdapter,
    )
}


def build_adapters(
    enabled: list[str] | None = None,
    overrides_path: str | None = None,
    session: requests.Session | None = None,
) -> list[SourceAdapter]:
    """有効な店舗のアダプタを店舗優先順で生成する.

    Args:
        enabled: 有効店舗名のリスト。None なら設定値。
        overrides_path: セレクタ上書き JSON。None なら設定値。
        session: 全アダプタで共有する requests.Session。None なら店舗ごとに生成。

    Raises:
        KeyError: 未知の店舗名
    """
    names = ENABLED_STORES if enabled is None else enabled
    wanted = {get_profile(name).name for name in names}
    selectors = load_selectors(SELECTOR_OVERRIDES_PATH if overrides_path is None else overrides_path)

    adapters = [
        ADAPTER_CLASSES[p.name](selectors=selectors[p.name], session=session)
        for p in STORE_ORDER
        if p.name in wanted
    ]
    logger.info("有効な店舗: %s", ", ".join(a.store for a in adapters))
    return adapters
