# price_tracker/services/retry.py

"""Bounded exponential-backoff retry around one fetch+extract attempt."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from price_tracker.errors import ItemUnavailableError, PriceNotFoundError

logger = logging.getLogger("price_tracker.retry")

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


class RetryPolicy:
    """Retry an async operation up to ``max_retries`` extra times.

    Attempt ``n`` (0-based) that fails is followed by a wait of
    ``backoff_base * 2 ** n`` before attempt ``n + 1``. Exhaustion
    yields ``None`` instead of an exception.
    """

    def __init__(
        self,
        max_retries: int = 3,
        backoff_base: float = 5.0,
        retry_on_not_found: bool = True,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.retry_on_not_found = retry_on_not_found
        self._sleep = sleep

    def backoff_for(self, attempt: int) -> float:
        return self.backoff_base * (2**attempt)

    def total_backoff(self) -> float:
        """Wall-clock backoff of a fully exhausted retry sequence."""
        return sum(self.backoff_for(a) for a in range(self.max_retries))

    async def run(
        self,
        operation: Callable[[int], Awaitable[T]],
        label: str,
    ) -> T | None:
        """Run ``operation(attempt)`` until it succeeds or retries run out."""
        for attempt in range(self.max_retries + 1):
            try:
                return await operation(attempt)
            except ItemUnavailableError as exc:
                logger.info("%s: %s, not retrying", label, exc)
                return None
            except PriceNotFoundError as exc:
                if not self.retry_on_not_found:
                    logger.info("%s: %s, skipping", label, exc)
                    return None
                logger.warning(
                    "%s: attempt %d/%d found no price",
                    label,
                    attempt + 1,
                    self.max_retries + 1,
                )
            except Exception as exc:
                logger.warning(
                    "%s: attempt %d/%d failed: %s",
                    label,
                    attempt + 1,
                    self.max_retries + 1,
                    exc,
                    exc_info=True,
                )

            if attempt < self.max_retries:
                await self._sleep(self.backoff_for(attempt))

        logger.error(
            "%s: giving up after %d attempts", label, self.max_retries + 1
        )
        return None
