# price_tracker/scrapers/base_extractor.py

"""Abstract base class for product-page price extractors."""

import json
import logging
import re
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any

from price_tracker.config.settings import Settings
from price_tracker.models.observation import ExtractedPrice

_NUMBER_RE = re.compile(r"\d[\d\s.,]*")


class BaseExtractor(ABC):
    """Turns raw page HTML into an :class:`ExtractedPrice`."""

    def __init__(
        self, source_name: str, settings: Settings | None = None
    ) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"price_tracker.extractor.{source_name}"
        )
        self.settings = settings or Settings()
        self.selectors: dict[str, Any] = self._load_selectors()

    def _load_selectors(self) -> dict[str, Any]:
        """Load CSS selectors for this source from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, Any] = all_selectors.get(self.source_name, {})
        return result

    @staticmethod
    def parse_price(text: str | None) -> Decimal | None:
        """Parse a displayed price such as ``'1 299,99 zł'`` or ``'1,299.00'``.

        The rightmost ``,`` or ``.`` followed by one or two digits is the
        decimal separator; every other separator is a thousands mark.
        Returns ``None`` when no number is present.
        """
        if not text:
            return None
        match = _NUMBER_RE.search(text)
        if not match:
            return None
        raw = re.sub(r"\s", "", match.group(0)).rstrip(".,")

        last_sep = max(raw.rfind(","), raw.rfind("."))
        if last_sep != -1 and 1 <= len(raw) - last_sep - 1 <= 2:
            whole = re.sub(r"[.,]", "", raw[:last_sep])
            normalised = f"{whole}.{raw[last_sep + 1:]}"
        else:
            normalised = re.sub(r"[.,]", "", raw)

        try:
            return Decimal(normalised)
        except InvalidOperation:
            return None

    @abstractmethod
    def extract(self, raw: str) -> ExtractedPrice | None:
        """Return the page's title and price, or ``None`` if not found.

        Implementations raise
        :class:`~price_tracker.errors.ItemUnavailableError` when the page
        definitively says the item cannot be bought.
        """
        ...
