# tests/test_pacing.py

"""Tests for the inter-request pacing policy."""

import random
import unittest
from unittest.mock import MagicMock

from price_tracker.services.pacing import SPREAD, PacingPolicy


class TestSimplePacing(unittest.TestCase):
    """Fixed base delay plus uniform jitter."""

    def test_within_jitter_bounds(self) -> None:
        policy = PacingPolicy(base=8.0, jitter=5.0, floor=1.0, rng=random.Random(7))
        for position in range(200):
            delay = policy.next_delay(50, position)
            self.assertGreaterEqual(delay, 3.0)
            self.assertLessEqual(delay, 13.0)

    def test_floor_applies(self) -> None:
        """A jitter larger than the base never yields less than the floor."""
        rng = MagicMock()
        rng.uniform.return_value = -5.0
        policy = PacingPolicy(base=2.0, jitter=5.0, floor=1.0, rng=rng)
        self.assertEqual(policy.next_delay(10, 1), 1.0)

    def test_deterministic_with_seeded_rng(self) -> None:
        a = PacingPolicy(rng=random.Random(42))
        b = PacingPolicy(rng=random.Random(42))
        self.assertEqual(
            [a.next_delay(5, i) for i in range(5)],
            [b.next_delay(5, i) for i in range(5)],
        )


class TestSpreadPacing(unittest.TestCase):
    """A daily window spread evenly across all items."""

    def test_average_delay_with_jitter(self) -> None:
        policy = PacingPolicy(
            mode=SPREAD,
            window=86400.0,
            spread_jitter=0.4,
            spread_floor=60.0,
            rng=random.Random(3),
        )
        # 86400 / 100 = 864s average, +-40%
        for position in range(100):
            delay = policy.next_delay(100, position)
            self.assertGreaterEqual(delay, 864 * 0.6)
            self.assertLessEqual(delay, 864 * 1.4)

    def test_large_item_count_hits_floor(self) -> None:
        policy = PacingPolicy(mode=SPREAD, window=86400.0, spread_floor=60.0)
        self.assertEqual(policy.next_delay(100_000, 0), 60.0)

    def test_zero_items_returns_floor(self) -> None:
        policy = PacingPolicy(mode=SPREAD, spread_floor=60.0)
        self.assertEqual(policy.next_delay(0, 0), 60.0)


class TestPacingValidation(unittest.TestCase):

    def test_unknown_mode_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PacingPolicy(mode="burst")


if __name__ == "__main__":
    unittest.main()
