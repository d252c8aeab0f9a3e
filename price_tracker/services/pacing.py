# price_tracker/services/pacing.py

"""Inter-request delay policy emulating a human browsing cadence."""

import logging
import random
from dataclasses import dataclass, field

logger = logging.getLogger("price_tracker.pacing")

SIMPLE = "simple"
SPREAD = "spread"


@dataclass
class PacingPolicy:
    """Computes how long to wait before the next request in a batch.

    ``simple`` mode adds uniform jitter around a fixed base delay.
    ``spread`` mode divides a whole time window (a day by default)
    evenly across all tracked items and jitters that average.
    Both modes floor the result so the delay never collapses to zero.
    """

    mode: str = SIMPLE
    base: float = 8.0
    jitter: float = 5.0
    floor: float = 1.0
    window: float = 24 * 3600.0
    spread_jitter: float = 0.4
    spread_floor: float = 60.0
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self) -> None:
        if self.mode not in (SIMPLE, SPREAD):
            raise ValueError(f"Unknown pacing mode: {self.mode!r}")

    def next_delay(self, item_count: int, position: int) -> float:
        """Return the delay in seconds before the item at *position*."""
        if self.mode == SPREAD:
            delay = self._spread_delay(item_count)
        else:
            delay = self.base + self.rng.uniform(-self.jitter, self.jitter)
            delay = max(self.floor, delay)
        logger.debug(
            "Pacing delay before item %d/%d: %.1fs",
            position,
            item_count,
            delay,
        )
        return delay

    def _spread_delay(self, item_count: int) -> float:
        if item_count <= 0:
            return self.spread_floor
        avg = self.window / item_count
        factor = self.rng.uniform(1 - self.spread_jitter, 1 + self.spread_jitter)
        return max(self.spread_floor, avg * factor)
