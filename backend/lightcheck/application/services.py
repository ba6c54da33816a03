from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from lightcheck.application.analysis import AnalysisQueue
from lightcheck.application.export import render_report, write_report
from lightcheck.application.session import ReviewSession
from lightcheck.domain.errors import ConfigurationError, ExportError, QueueError, ResetNotConfirmedError
from lightcheck.domain.models import BatchDescriptor, QueueCommandResult, ReviewRecord
from lightcheck.infra.ports.queue import QueuePort

logger = logging.getLogger(__name__)

QueueFactory = Callable[[str], QueuePort]


class ReviewWorkflowService:
    """Queue controls, analysis scheduling and human validation for one session.

    Queue commands run one at a time; a second command issued while one is
    in flight waits for it. Failures post an error status on the session and
    are re-raised so the caller can report them.
    """

    def __init__(self, *, session: ReviewSession, queue_factory: QueueFactory, analysis: AnalysisQueue):
        self.session = session
        self.queue_factory = queue_factory
        self.analysis = analysis
        self._queue: QueuePort | None = None
        self._queue_lock = asyncio.Lock()

    def configure(self, queue_url: str) -> None:
        url = (queue_url or "").strip()
        if not url:
            raise ConfigurationError("Queue URL must not be empty.")
        self.session.queue_url = url
        self._queue = None
        logger.info("Queue endpoint configured")

    def _queue_client(self) -> QueuePort:
        if not self.session.is_configured:
            self.session.post_status("Please configure the queue API URL first.", "error")
            raise ConfigurationError("Queue URL is not configured.")
        if self._queue is None:
            self._queue = self.queue_factory(self.session.queue_url or "")
        return self._queue

    async def _command(self, action: str, failure_text: str) -> QueueCommandResult:
        queue = self._queue_client()
        try:
            if action == "init":
                result = await queue.initialize()
            else:
                result = await queue.reset()
        except QueueError:
            logger.exception("Queue %s failed", action)
            self.session.post_status(failure_text, "error")
            raise
        if not result.success:
            self.session.post_status(failure_text, "error")
            raise QueueError(result.message or failure_text)
        return result

    async def init_queue(self) -> QueueCommandResult:
        async with self._queue_lock:
            result = await self._command("init", "Failed to initialize queue.")
            self.session.clear_batch()
            self.session.post_status("Queue initialized successfully.", "success")
            return result

    async def fetch_next_batch(self) -> BatchDescriptor | None:
        async with self._queue_lock:
            queue = self._queue_client()
            try:
                batch = await queue.fetch_next_batch()
            except QueueError:
                logger.exception("Fetching next batch failed")
                self.session.post_status("Failed to fetch next batch.", "error")
                raise

            if batch is None:
                self.session.clear_batch()
                self.session.post_status("No more batches available.", "info")
                return None

            to_analyze = self.session.open_batch(batch, in_flight=self.analysis.in_flight)
            self.run_analysis(to_analyze)
            return batch

    async def reset_queue(self, *, confirmed: bool) -> QueueCommandResult:
        if not confirmed:
            raise ResetNotConfirmedError("Queue reset requires explicit confirmation.")
        async with self._queue_lock:
            result = await self._command("reset", "Failed to reset queue.")
            self.session.clear_batch()
            self.session.post_status("Queue reset successfully.", "success")
            return result

    def run_analysis(self, records: list[ReviewRecord]) -> int:
        """Schedule classification without waiting; results merge as they arrive."""
        return self.analysis.submit(records)

    def confirm(self, image_id: str) -> ReviewRecord:
        return self.session.confirm(image_id)

    def deny(self, image_id: str) -> ReviewRecord:
        return self.session.deny(image_id)

    def export_report(self) -> bytes | None:
        history = self.session.history
        if not history:
            self.session.post_status("No data to export.", "info")
            return None
        try:
            data = render_report(history)
        except Exception as exc:
            logger.exception("Report export failed")
            self.session.post_status("Failed to export report.", "error")
            raise ExportError("Failed to export report.") from exc
        self.session.post_status("Export completed successfully.", "success")
        return data

    def export_report_to(self, path: Path) -> Path | None:
        history = self.session.history
        if not history:
            self.session.post_status("No data to export.", "info")
            return None
        try:
            written = write_report(history, path)
        except OSError as exc:
            logger.exception("Report export to %s failed", path)
            self.session.post_status("Failed to export report.", "error")
            raise ExportError(f"Failed to export report to {path}.") from exc
        self.session.post_status("Export completed successfully.", "success")
        return written
