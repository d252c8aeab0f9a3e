# price_tracker/cli/runner.py

"""Process wiring: build the orchestrator once and run it."""

import asyncio
import logging
import signal

from rich.console import Console
from rich.table import Table

from price_tracker.config.settings import Settings
from price_tracker.errors import TrackerError
from price_tracker.models.batch_result import BatchResult
from price_tracker.scrapers.amazon_extractor import AmazonExtractor
from price_tracker.scrapers.page_fetcher import PageFetcher
from price_tracker.services.batch_orchestrator import BatchOrchestrator
from price_tracker.services.liveness import (
    create_liveness_app,
    start_liveness_server,
)
from price_tracker.services.notifier import build_notifier
from price_tracker.services.pacing import PacingPolicy
from price_tracker.services.retry import RetryPolicy
from price_tracker.storage.item_list import ItemListSource
from price_tracker.storage.price_store import PriceStore
from price_tracker.storage.progress_cursor import ProgressCursor

logger = logging.getLogger("price_tracker.cli")

# Stderr console so stdout stays clean for piping
_err = Console(stderr=True)


def build_orchestrator(
    settings: Settings, dry_run: bool = False
) -> BatchOrchestrator:
    """Construct every collaborator and load durable state."""
    price_store = PriceStore(settings.PRICES_FILE, settings.DEFAULT_CURRENCY)
    price_store.load()
    cursor = ProgressCursor(settings.PROGRESS_FILE)
    cursor.load()

    return BatchOrchestrator(
        item_source=ItemListSource(settings.ITEMS_FILE),
        price_store=price_store,
        cursor=cursor,
        fetcher=PageFetcher(settings),
        extractor=AmazonExtractor(settings),
        notifier=build_notifier(settings, dry_run=dry_run),
        pacing=PacingPolicy(
            mode=settings.PACING_MODE,
            base=settings.PACING_BASE,
            jitter=settings.PACING_JITTER,
            floor=settings.PACING_FLOOR,
            window=settings.SPREAD_WINDOW,
            spread_jitter=settings.SPREAD_JITTER,
            spread_floor=settings.SPREAD_FLOOR,
        ),
        retry=RetryPolicy(
            max_retries=settings.MAX_RETRIES,
            backoff_base=settings.BACKOFF_BASE,
            retry_on_not_found=settings.RETRY_ON_PRICE_NOT_FOUND,
        ),
        batch_size=settings.BATCH_SIZE,
        batch_pause=settings.BATCH_PAUSE,
    )


async def run_worker(settings: Settings, dry_run: bool, serve: bool) -> int:
    """Run the batch loop until SIGTERM/SIGINT."""
    orchestrator = build_orchestrator(settings, dry_run=dry_run)
    if serve:
        start_liveness_server(
            create_liveness_app(orchestrator.status),
            settings.LIVENESS_HOST,
            settings.LIVENESS_PORT,
        )

    worker = asyncio.create_task(orchestrator.run())
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, worker.cancel)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handlers unavailable for %s", sig)

    try:
        await worker
    except asyncio.CancelledError:
        logger.info("Worker cancelled, shutting down")
    return 0


def _print_summary(result: BatchResult) -> None:
    """Render a Rich table for one batch."""
    table = Table(title="Batch Summary", title_style="bold cyan")
    table.add_column("Range", style="dim")
    table.add_column("Attempted", justify="right")
    table.add_column("Succeeded", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Drops", justify="right", style="magenta")
    table.add_row(
        f"{result.start}-{max(result.end - 1, result.start)} / {result.item_count}",
        str(result.attempted),
        str(result.succeeded),
        str(result.failed),
        str(result.drops_found),
    )
    Console().print(table)
    if result.cycle_completed:
        _err.print("[dim]Cycle completed, cursor reset to 0[/dim]")


async def run_once(settings: Settings, dry_run: bool) -> int:
    """Run a single batch and print its summary. Exit code 1 on failure."""
    orchestrator = build_orchestrator(settings, dry_run=dry_run)
    try:
        result = await orchestrator.run_batch()
    except TrackerError as exc:
        logger.error("Batch failed: %s", exc, exc_info=True)
        _err.print(f"[red]Batch failed: {exc}[/red]")
        return 1
    if result is None:
        return 1
    _print_summary(result)
    return 0 if result.failed == 0 else 1


def run_check(settings: Settings, url: str) -> int:
    """Fetch and parse a single URL, printing what was found."""
    fetcher = PageFetcher(settings)
    extractor = AmazonExtractor(settings)
    _err.print(f"[bold]Checking:[/bold] {url}")

    try:
        raw = fetcher.fetch(url)
        extracted = extractor.extract(raw)
    except TrackerError as exc:
        _err.print(f"[red]✗ {type(exc).__name__}: {exc}[/red]")
        return 1

    if extracted is None:
        _err.print("[yellow]✗ No price found on page[/yellow]")
        return 1

    _err.print(f"[green]✓ Title:[/green] {extracted.title}")
    _err.print(
        f"[green]✓ Price:[/green] {extracted.price} {extracted.currency}"
    )
    return 0
