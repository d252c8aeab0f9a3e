# price_tracker/scrapers/page_fetcher.py

"""HTTP page fetcher with browser impersonation and block detection."""

import logging
import random
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from price_tracker.config.settings import Settings
from price_tracker.errors import FetchError


class PageFetcher:
    """Fetch raw product-page HTML, one attempt per call.

    Retries are not handled here; the caller wraps :meth:`fetch` in a
    retry policy and passes the attempt number so that each retry goes
    out under a different user agent.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.logger = logging.getLogger("price_tracker.fetcher")
        self.settings = settings or Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._rng = rng or random.Random()
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT
        self._user_agents: list[str] = list(self.settings.USER_AGENTS)
        self._last_user_agent: str | None = None
        proxy = self.settings.PROXY_URL
        self._proxies: dict[str, str] | None = (
            {"http": proxy, "https": proxy} if proxy else None
        )

    def _next_user_agent(self) -> str:
        """Pick a user agent different from the previous request's."""
        candidates = [
            ua for ua in self._user_agents if ua != self._last_user_agent
        ] or self._user_agents
        ua = self._rng.choice(candidates)
        self._last_user_agent = ua
        return ua

    def _headers(self, user_agent: str) -> dict[str, str]:
        return {
            **self.settings.DEFAULT_HEADERS,
            "User-Agent": user_agent,
        }

    def _is_blocked(self, text: str) -> bool:
        """Check for Cloudflare challenge pages and CAPTCHA indicators."""
        lower = text.lower()

        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "Cloudflare challenge detected (marker: '%s')",
                    marker,
                )
                return True

        # Generic CAPTCHA keyword scan (skip if page has
        # real product content to avoid false positives)
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "CAPTCHA keyword '%s' detected", keyword
                    )
                    return True
        return False

    def _fetch_direct(self, url: str, headers: dict[str, str]) -> str:
        try:
            resp = self.session.get(
                url,
                headers=headers,
                proxies=self._proxies,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            raise FetchError(f"Request error for {url}: {exc}") from exc

        if resp.status_code != 200:
            raise FetchError(f"HTTP {resp.status_code} for {url}")
        text: str = resp.text
        if self._is_blocked(text):
            raise FetchError(f"Blocked by anti-bot page for {url}")
        return text

    def _fetch_fallback(self, url: str, headers: dict[str, str]) -> str:
        """Retry the same URL through cloudscraper (JS challenge solver)."""
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                url,
                headers=headers,
                proxies=self._proxies,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            raise FetchError(
                f"cloudscraper fallback failed for {url}: {exc}"
            ) from exc

        if resp.status_code != 200:
            raise FetchError(
                f"cloudscraper fallback HTTP {resp.status_code} for {url}"
            )
        text = str(resp.text)
        if self._is_blocked(text):
            raise FetchError(f"Blocked by anti-bot page for {url}")
        return text

    def fetch(self, url: str, attempt: int = 0) -> str:
        """Fetch *url* and return the page HTML.

        Raises :class:`FetchError` on network failure, timeout, non-200
        status or a detected challenge/CAPTCHA page.
        """
        user_agent = self._next_user_agent()
        headers = self._headers(user_agent)
        self.logger.debug(
            "GET %s (attempt %d, ua=%s)", url, attempt + 1, user_agent[:40]
        )

        try:
            return self._fetch_direct(url, headers)
        except FetchError as exc:
            if not self.settings.USE_CLOUDSCRAPER_FALLBACK:
                raise
            self.logger.info(
                "curl_cffi failed (%s), falling back to cloudscraper", exc
            )
        return self._fetch_fallback(url, headers)
