# price_tracker/models/batch_result.py

"""Per-batch summary model (reporting only, never persisted)."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class BatchResult:
    """Counters for one orchestration pass over a slice of the item list."""

    start: int = 0
    end: int = 0
    item_count: int = 0
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    drops_found: int = 0
    cycle_completed: bool = False

    def summary(self) -> str:
        """Human-readable one-line summary."""
        text = (
            f"Batch [{self.start}, {self.end}) of {self.item_count}: "
            f"attempted={self.attempted} succeeded={self.succeeded} "
            f"failed={self.failed} drops={self.drops_found}"
        )
        if self.cycle_completed:
            text += " (cycle completed)"
        return text

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
