"""設定モジュール: 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [s.strip() for s in raw.split(",") if s.strip()]


# --- User-Agent ---
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36",
)

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
ACCEPT_LANGUAGE_JA = "ja-JP,ja;q=0.9,en-US;q=0.8,en;q=0.7"
ACCEPT_LANGUAGE_EN = "en-US,en;q=0.9,ja;q=0.8"

# --- リクエスト設定 ---
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))  # 秒 (requests 単体)
SOURCE_TIMEOUT = float(os.getenv("SOURCE_TIMEOUT", "6"))  # 秒 (店舗ごと)
# 店舗ごとの期限より長くすること
AGGREGATE_TIMEOUT = float(os.getenv("AGGREGATE_TIMEOUT", "8"))  # 秒 (全体, 0 で無効)
# 店舗検索用スレッド数 (店舗数 x 同時リクエスト数)
SEARCH_WORKERS = int(os.getenv("SEARCH_WORKERS", "24"))

# --- 店舗 ---
ENABLED_STORES = _env_list(
    "ENABLED_STORES",
    "Amazon,BookWalker,RightStuf,Rakuten,eBookJapan,CMoa",
)
SELECTOR_OVERRIDES_PATH = os.getenv("SELECTOR_OVERRIDES_PATH", "")

# --- 検索結果キャッシュ ---
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "3600"))
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "100"))
CACHE_EVICT_COUNT = int(os.getenv("CACHE_EVICT_COUNT", "10"))

# --- 為替 ---
DEFAULT_CURRENCY = "JPY"
RATE_API_URL = os.getenv("RATE_API_URL", "https://open.er-api.com/v6/latest/USD")
RATE_CACHE_TTL_SECONDS = float(os.getenv("RATE_CACHE_TTL_SECONDS", str(24 * 60 * 60)))
FALLBACK_RATES = {
    "USD": 1.0,
    "JPY": 150.27,
    "EUR": 0.92,
    "GBP": 0.79,
    "CAD": 1.37,
    "AUD": 1.52,
}

# --- API サーバー ---
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# --- ログ ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = Path(os.getenv("LOG_DIR", str(_PROJECT_ROOT / "logs")))
