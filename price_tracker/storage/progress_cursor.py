# price_tracker/storage/progress_cursor.py

"""Durable pointer recording where the next batch resumes."""

import logging
from pathlib import Path
from typing import Any

from price_tracker.storage.json_file import load_json, write_json_atomic

logger = logging.getLogger("price_tracker.progress")


class ProgressCursor:
    """Round-robin position into the ordered tracking list."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.next_index: int = 0

    def load(self) -> None:
        """Read the stored index, defaulting to 0 on any problem.

        Accepts the legacy ``{"index": n}`` shape as well as
        ``{"next_index": n}``.
        """
        raw: Any = load_json(self.path, {})
        value: Any = None
        if isinstance(raw, dict):
            value = raw.get("next_index", raw.get("index"))

        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            self.next_index = value
        else:
            if value is not None:
                logger.warning(
                    "Invalid cursor value %r in %s, resetting to 0",
                    value,
                    self.path,
                )
            self.next_index = 0

    def advance(self, end: int, item_count: int) -> bool:
        """Move past a processed slice ending at *end*.

        Wraps to 0 once the end of the list is reached and returns
        ``True`` in that case.
        """
        if end >= item_count:
            self.next_index = 0
            return True
        self.next_index = end
        return False

    def persist(self) -> None:
        """Atomically write the cursor. Raises ``StoreWriteError``."""
        write_json_atomic(self.path, {"next_index": self.next_index})
        logger.debug("Persisted cursor next_index=%d", self.next_index)
