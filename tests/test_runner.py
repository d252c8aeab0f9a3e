# tests/test_runner.py

"""Tests for process wiring in the CLI runner."""

import json
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from price_tracker.cli import runner
from price_tracker.config.settings import Settings
from price_tracker.errors import FetchError
from price_tracker.models.batch_result import BatchResult
from price_tracker.models.observation import ExtractedPrice
from price_tracker.services.notifier import LogNotifier
from price_tracker.services.pacing import SPREAD


def _settings(tmp: Path) -> Settings:
    settings = Settings()
    settings.ITEMS_FILE = tmp / "books.txt"
    settings.PRICES_FILE = tmp / "prices.json"
    settings.PROGRESS_FILE = tmp / "progress.json"
    settings.TELEGRAM_BOT_TOKEN = ""
    settings.TELEGRAM_CHAT_ID = ""
    return settings


@patch("price_tracker.scrapers.page_fetcher.curl_requests.Session")
class TestBuildOrchestrator(unittest.TestCase):
    """Settings flow into the injected collaborators."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)

    def test_loads_persisted_state(self, _session: MagicMock) -> None:
        settings = _settings(self.tmp)
        settings.PROGRESS_FILE.write_text(json.dumps({"index": 3}), encoding="utf-8")
        settings.PRICES_FILE.write_text(
            json.dumps({"https://a": {"title": "A", "price": "5.00"}}),
            encoding="utf-8",
        )
        orch = runner.build_orchestrator(settings)
        self.assertEqual(orch.cursor.next_index, 3)
        self.assertIn("https://a", orch.price_store)

    def test_policies_follow_settings(self, _session: MagicMock) -> None:
        settings = _settings(self.tmp)
        settings.BATCH_SIZE = 7
        settings.MAX_RETRIES = 2
        settings.BACKOFF_BASE = 1.5
        settings.PACING_MODE = SPREAD
        orch = runner.build_orchestrator(settings)
        self.assertEqual(orch.batch_size, 7)
        self.assertEqual(orch.retry.max_retries, 2)
        self.assertEqual(orch.retry.backoff_base, 1.5)
        self.assertEqual(orch.pacing.mode, SPREAD)

    def test_no_credentials_uses_log_notifier(self, _session: MagicMock) -> None:
        orch = runner.build_orchestrator(_settings(self.tmp))
        self.assertIsInstance(orch.notifier, LogNotifier)


class TestRunOnce(unittest.IsolatedAsyncioTestCase):
    """Single-batch mode exit codes."""

    def _orch(self, result: object = None, error: Exception | None = None) -> MagicMock:
        orch = MagicMock()
        orch.run_batch = AsyncMock(return_value=result, side_effect=error)
        return orch

    async def test_clean_batch_exit_zero(self) -> None:
        result = BatchResult(start=0, end=2, item_count=2, attempted=2, succeeded=2)
        with patch.object(runner, "build_orchestrator", return_value=self._orch(result)):
            self.assertEqual(await runner.run_once(Settings(), dry_run=True), 0)

    async def test_failed_items_exit_one(self) -> None:
        result = BatchResult(start=0, end=2, item_count=2, attempted=2, succeeded=1, failed=1)
        with patch.object(runner, "build_orchestrator", return_value=self._orch(result)):
            self.assertEqual(await runner.run_once(Settings(), dry_run=True), 1)

    async def test_batch_error_exit_one(self) -> None:
        orch = self._orch(error=FetchError("boom"))
        with patch.object(runner, "build_orchestrator", return_value=orch):
            self.assertEqual(await runner.run_once(Settings(), dry_run=True), 1)


class TestRunCheck(unittest.TestCase):
    """Single-URL diagnostic mode."""

    @patch.object(runner, "AmazonExtractor")
    @patch.object(runner, "PageFetcher")
    def test_price_found(self, fetcher_cls: MagicMock, extractor_cls: MagicMock) -> None:
        fetcher_cls.return_value.fetch.return_value = "<html/>"
        extractor_cls.return_value.extract.return_value = ExtractedPrice(
            title="Book", price=Decimal("10.00"), currency="PLN"
        )
        self.assertEqual(runner.run_check(Settings(), "https://a"), 0)

    @patch.object(runner, "AmazonExtractor")
    @patch.object(runner, "PageFetcher")
    def test_no_price(self, fetcher_cls: MagicMock, extractor_cls: MagicMock) -> None:
        fetcher_cls.return_value.fetch.return_value = "<html/>"
        extractor_cls.return_value.extract.return_value = None
        self.assertEqual(runner.run_check(Settings(), "https://a"), 1)

    @patch.object(runner, "AmazonExtractor")
    @patch.object(runner, "PageFetcher")
    def test_fetch_error(self, fetcher_cls: MagicMock, _extractor_cls: MagicMock) -> None:
        fetcher_cls.return_value.fetch.side_effect = FetchError("HTTP 503")
        self.assertEqual(runner.run_check(Settings(), "https://a"), 1)


if __name__ == "__main__":
    unittest.main()
