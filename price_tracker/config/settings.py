# price_tracker/config/settings.py

"""Central configuration for the price_tracker worker.

Every value can be overridden through the environment (or a ``.env``
file picked up by python-dotenv).
"""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value or default


def _data_dir() -> Path:
    """Working files live under DATA_DIR, else the current directory."""
    return Path(_env_str("DATA_DIR", str(Path.cwd())))


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name, "").strip()
    return float(value) if value else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name, "").strip().lower()
    if not value:
        return default
    return value in ("1", "true", "yes", "on")


class Settings:
    """Central configuration for the price_tracker worker."""

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = _data_dir()
    ITEMS_FILE: Path = DATA_DIR / _env_str("ITEMS_FILE", "books.txt")
    PRICES_FILE: Path = DATA_DIR / _env_str("PRICES_FILE", "prices.json")
    PROGRESS_FILE: Path = DATA_DIR / _env_str("PROGRESS_FILE", "progress.json")
    SELECTORS_PATH: Path = BASE_DIR / "price_tracker" / "config" / "selectors.json"
    LOGS_DIR: Path = DATA_DIR / "logs"

    # --- Batching ---
    BATCH_SIZE: int = _env_int("BATCH_SIZE", 4)
    BATCH_PAUSE: float = _env_float("BATCH_PAUSE_SECONDS", 8 * 60.0)

    # --- Scraping ---
    REQUEST_TIMEOUT: int = _env_int("REQUEST_TIMEOUT", 20)
    PROXY_URL: str = _env_str("PROXY_URL", "")
    USE_CLOUDSCRAPER_FALLBACK: bool = _env_bool(
        "USE_CLOUDSCRAPER_FALLBACK", True
    )
    DEFAULT_CURRENCY: str = _env_str("DEFAULT_CURRENCY", "PLN")

    # --- Retry ---
    MAX_RETRIES: int = _env_int("MAX_RETRIES", 3)
    BACKOFF_BASE: float = _env_float("BACKOFF_BASE_SECONDS", 5.0)
    RETRY_ON_PRICE_NOT_FOUND: bool = _env_bool(
        "RETRY_ON_PRICE_NOT_FOUND", True
    )

    # --- Pacing ---
    PACING_MODE: str = _env_str("PACING_MODE", "simple")  # "simple" | "spread"
    PACING_BASE: float = _env_float("PACING_BASE_SECONDS", 8.0)
    PACING_JITTER: float = _env_float("PACING_JITTER_SECONDS", 5.0)
    PACING_FLOOR: float = _env_float("PACING_FLOOR_SECONDS", 1.0)
    SPREAD_WINDOW: float = _env_float("SPREAD_WINDOW_SECONDS", 24 * 3600.0)
    SPREAD_JITTER: float = _env_float("SPREAD_JITTER", 0.4)
    SPREAD_FLOOR: float = _env_float("SPREAD_FLOOR_SECONDS", 60.0)

    # --- Anti-blocking ---
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
        "wprowadź znaki",
    ]
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENTS: list[str] = [
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/130.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:132.0) "
            "Gecko/20100101 Firefox/132.0"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "Version/17.6 Safari/605.1.15"
        ),
    ]
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": _env_str(
            "ACCEPT_LANGUAGE", "pl-PL,pl;q=0.9,en;q=0.8"
        ),
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Notifications ---
    TELEGRAM_BOT_TOKEN: str = _env_str("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_CHAT_ID: str = _env_str("TELEGRAM_CHAT_ID", "")
    TELEGRAM_MAX_RETRIES: int = _env_int("TELEGRAM_MAX_RETRIES", 3)
    TELEGRAM_RETRY_BASE: float = _env_float("TELEGRAM_RETRY_BASE_SECONDS", 1.0)

    # --- Liveness ---
    LIVENESS_ENABLED: bool = _env_bool("LIVENESS_ENABLED", True)
    LIVENESS_HOST: str = _env_str("LIVENESS_HOST", "0.0.0.0")
    LIVENESS_PORT: int = _env_int("PORT", 3000)
