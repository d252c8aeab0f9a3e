# price_tracker/services/batch_orchestrator.py

"""Resumable batch loop: fetch, extract, compare, notify, persist."""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, Protocol

from price_tracker.errors import PriceNotFoundError
from price_tracker.models.batch_result import BatchResult
from price_tracker.models.observation import ExtractedPrice, Observation
from price_tracker.models.price_drop import PriceDrop
from price_tracker.services.notifier import Notifier
from price_tracker.services.pacing import PacingPolicy
from price_tracker.services.retry import RetryPolicy
from price_tracker.storage.price_store import PriceStore
from price_tracker.storage.progress_cursor import ProgressCursor

logger = logging.getLogger("price_tracker.orchestrator")


class ItemSource(Protocol):
    def read(self) -> list[str]: ...


class Fetcher(Protocol):
    def fetch(self, url: str, attempt: int = 0) -> str: ...


class Extractor(Protocol):
    def extract(self, raw: str) -> ExtractedPrice | None: ...


class BatchOrchestrator:
    """Drives one bounded slice of the tracking list per call.

    The orchestrator owns the price store and progress cursor while a
    batch runs. Only one batch may be in flight: a second concurrent
    :meth:`run_batch` call logs a skip and returns ``None``.

    All waiting (pacing, backoff, batch pause) goes through the injected
    *sleep* coroutine; blocking collaborator calls run in worker threads
    so the event loop stays free.
    """

    def __init__(
        self,
        *,
        item_source: ItemSource,
        price_store: PriceStore,
        cursor: ProgressCursor,
        fetcher: Fetcher,
        extractor: Extractor,
        notifier: Notifier,
        pacing: PacingPolicy,
        retry: RetryPolicy,
        batch_size: int = 4,
        batch_pause: float = 480.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.item_source = item_source
        self.price_store = price_store
        self.cursor = cursor
        self.fetcher = fetcher
        self.extractor = extractor
        self.notifier = notifier
        self.pacing = pacing
        self.retry = retry
        self.batch_size = batch_size
        self.batch_pause = batch_pause
        self._sleep = sleep
        self._in_flight = False
        self._status: dict[str, Any] = {
            "running": False,
            "batches_completed": 0,
            "last_result": None,
            "last_error": None,
            "last_batch_at": None,
        }

    # ── Status ───────────────────────────────────────────

    def status(self) -> dict[str, Any]:
        """Return a copy of the current status snapshot."""
        return dict(self._status)

    # ── Per-item work ────────────────────────────────────

    def _fetch_and_extract_sync(
        self, identifier: str, attempt: int
    ) -> ExtractedPrice:
        raw = self.fetcher.fetch(identifier, attempt)
        extracted = self.extractor.extract(raw)
        if extracted is None:
            raise PriceNotFoundError(f"No price found for {identifier}")
        return extracted

    async def _fetch_and_extract(
        self, identifier: str, attempt: int
    ) -> ExtractedPrice:
        # Fetch and HTML parsing both block, so they share one thread hop
        return await asyncio.to_thread(
            self._fetch_and_extract_sync, identifier, attempt
        )

    async def _notify(self, drop: PriceDrop) -> None:
        """Deliver a drop alert; failures are logged, never raised."""
        try:
            delivered = await asyncio.to_thread(self.notifier.notify, drop)
        except Exception as exc:
            logger.error(
                "Notifier failed for %s: %s",
                drop.identifier,
                exc,
                exc_info=True,
            )
            return
        if not delivered:
            logger.warning("Notifier did not deliver alert for %s", drop.identifier)

    async def _process_item(
        self, identifier: str, result: BatchResult
    ) -> None:
        extracted = await self.retry.run(
            functools.partial(self._fetch_and_extract, identifier),
            label=identifier,
        )
        if extracted is None:
            result.failed += 1
            return

        observation = Observation.from_extracted(identifier, extracted)

        previous = self.price_store.get(identifier)
        if previous is None:
            logger.info(
                "First observation for '%s': %s %s",
                observation.title[:60],
                observation.price,
                observation.currency,
            )
        elif observation.price < previous.price:
            drop = PriceDrop(
                identifier=identifier,
                title=observation.title,
                old_price=previous.price,
                new_price=observation.price,
                currency=observation.currency,
            )
            result.drops_found += 1
            logger.info(
                "Price drop for '%s': %s -> %s (-%s%%)",
                drop.title[:60],
                drop.old_price,
                drop.new_price,
                drop.percent,
            )
            await self._notify(drop)

        self.price_store.update(observation)
        result.succeeded += 1

    # ── Batch ────────────────────────────────────────────

    async def run_batch(self) -> BatchResult | None:
        """Process the next slice of the list and persist progress.

        Returns ``None`` when another batch is already in flight.
        Raises :class:`~price_tracker.errors.ItemListError` or
        :class:`~price_tracker.errors.StoreWriteError` on batch-level
        failure; per-item failures are only counted.
        """
        if self._in_flight:
            logger.info("Batch already in progress, skipping")
            return None

        self._in_flight = True
        self._status["running"] = True
        try:
            result = await self._run_batch()
        except Exception as exc:
            self._status["last_error"] = f"{type(exc).__name__}: {exc}"
            raise
        finally:
            self._in_flight = False
            self._status["running"] = False

        self._status["batches_completed"] += 1
        self._status["last_result"] = result.to_dict()
        self._status["last_error"] = None
        self._status["last_batch_at"] = datetime.now(timezone.utc).isoformat()
        return result

    async def _run_batch(self) -> BatchResult:
        items = self.item_source.read()
        item_count = len(items)
        if item_count == 0:
            logger.warning("Tracking list is empty, nothing to do")
            return BatchResult()

        start = self.cursor.next_index
        if start >= item_count:
            logger.warning(
                "Cursor %d is past the end of %d items, restarting from 0",
                start,
                item_count,
            )
            start = 0
        end = min(start + self.batch_size, item_count)
        result = BatchResult(start=start, end=end, item_count=item_count)
        logger.info("Processing batch %d -> %d of %d", start, end - 1, item_count)

        for position, index in enumerate(range(start, end)):
            if position > 0:
                await self._sleep(self.pacing.next_delay(item_count, index))
            identifier = items[index]
            result.attempted += 1
            try:
                await self._process_item(identifier, result)
            except Exception as exc:
                result.failed += 1
                logger.error(
                    "Unexpected error processing %s: %s",
                    identifier,
                    exc,
                    exc_info=True,
                )

        # Prices first: a crash before the cursor write only repeats this range.
        self.price_store.persist()
        result.cycle_completed = self.cursor.advance(end, item_count)
        self.cursor.persist()

        if result.cycle_completed:
            logger.info("Cycle completed, cursor reset to 0")
        logger.info(result.summary())
        return result

    # ── Worker loop ──────────────────────────────────────

    async def run(self, iterations: int | None = None) -> None:
        """Run batches forever (or *iterations* times), pausing between them.

        A failing batch is logged and the loop carries on.
        """
        completed = 0
        while iterations is None or completed < iterations:
            try:
                await self.run_batch()
            except Exception as exc:
                logger.error("Batch failed: %s", exc, exc_info=True)
            completed += 1
            logger.debug("Sleeping %.0fs until next batch", self.batch_pause)
            await self._sleep(self.batch_pause)
