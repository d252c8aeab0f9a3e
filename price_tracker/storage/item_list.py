# price_tracker/storage/item_list.py

"""Reader for the newline-delimited tracking list."""

import logging
from pathlib import Path

from price_tracker.errors import ItemListError

logger = logging.getLogger("price_tracker.items")


def parse_item_lines(text: str) -> list[str]:
    """Return ordered, de-duplicated identifiers from list text.

    Blank lines and ``#`` comments are ignored. The first occurrence of
    a duplicate wins.
    """
    seen: set[str] = set()
    items: list[str] = []
    for line in text.splitlines():
        item = line.strip()
        if not item or item.startswith("#"):
            continue
        if item in seen:
            logger.debug("Ignoring duplicate item %s", item)
            continue
        seen.add(item)
        items.append(item)
    return items


class ItemListSource:
    """Tracking list backed by a text file, re-read on every call."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> list[str]:
        """Read the current list. Raises :class:`ItemListError`."""
        try:
            text = self.path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ItemListError(
                f"Cannot read tracking list {self.path}: {exc}"
            ) from exc
        return parse_item_lines(text)
