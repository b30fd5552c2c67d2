"""モックデータ生成.

スクレイピングが失敗・0件の場合のフォールバック。URL 内のカタログ ID
以外は (title, store) と店舗プロファイルだけで決まる。
"""

from __future__ import annotations

import random

from manga_price.models import Item
from manga_price.stores import STORE_ORDER, get_profile


class MockGenerator:
    """店舗ごとの推定 Item を生成する."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def generate(self, title: str, store: str) -> Item:
        """推定 Item を1件生成する. is_estimated は常に True."""
        profile = get_profile(store)
        low = 10 ** (profile.mock_id_digits - 1)
        catalog_id = self._rng.randint(low, low * 10 - 1)
        return Item(
            store=profile.name,
            title=f"{title} 1巻",
            price=profile.default_price,
            currency=profile.currency,
            url=profile.mock_url_template.format(id=catalog_id),
            image_url=profile.placeholder_image,
            availability=profile.default_availability,
            is_digital=profile.is_digital,
            is_estimated=True,
        )

    def generate_all(self, title: str, stores: list[str] | None = None) -> list[Item]:
        """指定店舗 (省略時は全店舗) 分を店舗優先順で生成する."""
        names = [p.name for p in STORE_ORDER] if stores is None else stores
        wanted = {get_profile(name).name for name in names}
        return [self.generate(title, p.name) for p in STORE_ORDER if p.name in wanted]
