# price_tracker/services/notifier.py

"""Price-drop notifiers (Telegram and log-only)."""

import logging
import time
from typing import Protocol

from curl_cffi import requests as curl_requests

from price_tracker.config.settings import Settings
from price_tracker.models.price_drop import PriceDrop

logger = logging.getLogger("price_tracker.notifier")

_CURRENCY_SYMBOLS: dict[str, str] = {"PLN": "zł", "EUR": "€", "USD": "$"}


class Notifier(Protocol):
    """Anything that can deliver a price-drop message."""

    def notify(self, drop: PriceDrop) -> bool:
        """Deliver *drop*; return ``False`` (or raise) on failure."""
        ...


def format_drop_message(drop: PriceDrop) -> str:
    """Render the plain-text alert for a price drop."""
    symbol = _CURRENCY_SYMBOLS.get(drop.currency, drop.currency)
    return (
        "📉 Price Drop!\n\n"
        f"{drop.title}\n"
        f"Old: {drop.old_price} {symbol}\n"
        f"New: {drop.new_price} {symbol}\n"
        f"Saved: {drop.saved} {symbol} ({drop.percent}%)\n"
        f"{drop.identifier}"
    )


class LogNotifier:
    """Writes drops to the log only (dry runs, missing credentials)."""

    def notify(self, drop: PriceDrop) -> bool:
        logger.info("[dry-run] %s", format_drop_message(drop).replace("\n", " | "))
        return True


class TelegramNotifier:
    """Sends drop alerts through the Telegram Bot API."""

    API_URL = "https://api.telegram.org/bot{token}/sendMessage"

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._url = self.API_URL.format(token=bot_token)
        self._chat_id = chat_id
        self.session = curl_requests.Session()

    def _post(self, text: str) -> curl_requests.Response:
        return self.session.post(
            self._url,
            data={
                "chat_id": self._chat_id,
                "text": text,
                "disable_web_page_preview": "true",
            },
            timeout=self.settings.REQUEST_TIMEOUT,
        )

    @staticmethod
    def _retry_after(resp: curl_requests.Response) -> float | None:
        try:
            payload = resp.json()
        except Exception:
            return None
        if not isinstance(payload, dict):
            return None
        params = payload.get("parameters")
        if not isinstance(params, dict):
            return None
        retry_after = params.get("retry_after")
        try:
            return float(retry_after)
        except (TypeError, ValueError):
            return None

    def notify(self, drop: PriceDrop) -> bool:
        """Send the alert, backing off on 429/5xx. Returns success."""
        text = format_drop_message(drop)
        max_retries = self.settings.TELEGRAM_MAX_RETRIES
        base = self.settings.TELEGRAM_RETRY_BASE

        for attempt in range(max_retries + 1):
            try:
                resp = self._post(text)
            except Exception as exc:
                logger.warning(
                    "Telegram request error on attempt %d: %s",
                    attempt + 1,
                    exc,
                )
                if attempt >= max_retries:
                    return False
                time.sleep(base * (2**attempt))
                continue

            if resp.status_code == 200:
                logger.info("Telegram alert sent for %s", drop.identifier)
                return True

            transient = resp.status_code == 429 or 500 <= resp.status_code <= 599
            if not transient or attempt >= max_retries:
                body = (resp.text or "").strip().replace("\n", " ")[:300]
                logger.error(
                    "Telegram send failed: HTTP %d %s",
                    resp.status_code,
                    body,
                )
                return False

            wait = self._retry_after(resp) or base * (2**attempt)
            time.sleep(min(60.0, max(0.1, wait)))
        return False


def build_notifier(settings: Settings, dry_run: bool = False) -> Notifier:
    """Return a Telegram notifier when configured, else a log notifier."""
    if dry_run:
        return LogNotifier()
    if not settings.TELEGRAM_BOT_TOKEN or not settings.TELEGRAM_CHAT_ID:
        logger.warning(
            "TELEGRAM_BOT_TOKEN/TELEGRAM_CHAT_ID not set, alerts go to the log only"
        )
        return LogNotifier()
    return TelegramNotifier(
        settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_CHAT_ID, settings
    )
