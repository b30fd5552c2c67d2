"""例外定義.

店舗単位の障害 (SourceError 系) は Aggregator 内でモックに置き換えられ、
HTTP 境界まで届くのは InvalidRequest と予期しない障害のみ。
"""


class MangaPriceError(Exception):
    """本パッケージの例外の基底クラス."""


class InvalidRequest(MangaPriceError):
    """検索リクエストが不正 (タイトル未指定など)."""


class SourceError(MangaPriceError):
    """店舗ごとの検索失敗."""

    def __init__(self, store: str, message: str) -> None:
        super().__init__(f"{store}: {message}")
        self.store = store
        self.message = message


class SourceFetchError(SourceError):
    """ネットワーク障害・非 2xx レスポンス."""


class SourceParseError(SourceError):
    """HTML の解析に失敗."""


class SourceTimeout(SourceError):
    """店舗の応答が期限内に返らなかった."""


class CurrencyUnsupported(MangaPriceError):
    """為替レートが存在しない通貨ペア."""

    def __init__(self, from_currency: str, to_currency: str) -> None:
        super().__init__(f"Currency not supported: {from_currency} or {to_currency}")
        self.from_currency = from_currency
        self.to_currency = to_currency


class InternalFault(MangaPriceError):
    """内部状態の不整合 (集約結果の件数が店舗数と一致しないなど).

    Aggregator が送出し、HTTP 境界では 500 になる。
    """
