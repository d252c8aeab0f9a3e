# price_tracker/scrapers/amazon_extractor.py

"""Price extractor for Amazon product pages (amazon.pl by default)."""

from bs4 import BeautifulSoup

from price_tracker.config.settings import Settings
from price_tracker.errors import ItemUnavailableError
from price_tracker.models.observation import ExtractedPrice
from price_tracker.scrapers.base_extractor import BaseExtractor


class AmazonExtractor(BaseExtractor):
    """Price extractor for Amazon product pages."""

    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__("amazon", settings)

    def _find_price_text(self, soup: BeautifulSoup) -> str | None:
        """Try each price selector in order, then whole+fraction spans."""
        for selector in self.selectors.get("price", []):
            el = soup.select_one(selector)
            if el:
                text = el.get_text(strip=True)
                if text:
                    self.logger.debug("Price matched '%s': %s", selector, text)
                    return text

        whole_el = soup.select_one(self.selectors.get("price_whole", ""))
        if whole_el:
            whole = whole_el.get_text(strip=True).rstrip(",.")
            fraction_el = soup.select_one(
                self.selectors.get("price_fraction", "")
            )
            fraction = fraction_el.get_text(strip=True) if fraction_el else ""
            if whole:
                return f"{whole},{fraction}" if fraction else whole
        return None

    def _check_availability(self, soup: BeautifulSoup) -> None:
        el = soup.select_one(self.selectors.get("availability", ""))
        if not el:
            return
        text = el.get_text(" ", strip=True).lower()
        for marker in self.selectors.get("unavailable_markers", []):
            if marker in text:
                raise ItemUnavailableError(f"Item unavailable: {text[:80]}")

    def extract(self, raw: str) -> ExtractedPrice | None:
        """Extract title and price from an Amazon product page."""
        soup = BeautifulSoup(raw, "lxml")

        title_el = soup.select_one(self.selectors["title"])
        title = title_el.get_text(strip=True) if title_el else ""

        price_text = self._find_price_text(soup)
        if price_text is None:
            # Only a priceless page can be definitively unavailable;
            # a listed price wins over a stale availability banner.
            self._check_availability(soup)
            self.logger.info("No price found on page '%s'", title[:60])
            return None

        price = self.parse_price(price_text)
        if price is None:
            self.logger.warning("Unparseable price text %r", price_text)
            return None

        return ExtractedPrice(
            title=title or "Unknown Title",
            price=price,
            currency=self.settings.DEFAULT_CURRENCY,
        )
