from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from lightcheck.application.session import ReviewSession
from lightcheck.domain.errors import ClassifierError
from lightcheck.domain.models import ReviewRecord
from lightcheck.infra.ports.classifier import ClassifierPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisJob:
    image_id: str
    name: str
    locator: str


class AnalysisQueue:
    """Unbounded backlog of classification jobs drained by a fixed worker pool.

    One worker keeps at most one classifier call in flight, which throttles
    cost on the external model. The worker count can be raised without
    changing callers; merges into the session never await, so each one is
    atomic with respect to other workers.

    An image id has at most one job queued or running at a time. Workers are
    bound to the event loop of the first ``submit``; when a later call comes
    from another loop, the old workers are cancelled and every unfinished job
    is queued again on the new loop.
    """

    def __init__(self, *, classifier: ClassifierPort, session: ReviewSession, workers: int = 1):
        self.classifier = classifier
        self.session = session
        self.worker_count = max(1, int(workers))
        self._queue: asyncio.Queue[AnalysisJob] | None = None
        self._workers: list[asyncio.Task] = []
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: dict[str, AnalysisJob] = {}

    def _ensure_started(self) -> asyncio.Queue[AnalysisJob]:
        loop = asyncio.get_running_loop()
        if self._queue is not None and self._loop is loop:
            return self._queue

        if self._loop is not None:
            self._abandon_loop(self._loop)
        self._loop = loop
        self._queue = asyncio.Queue()
        self._workers = [
            loop.create_task(self._worker(self._queue), name=f"analysis-worker-{idx}")
            for idx in range(self.worker_count)
        ]
        for job in self._pending.values():
            self._queue.put_nowait(job)
        if self._pending:
            logger.info("Re-queued %d unfinished analysis job(s) on a new event loop", len(self._pending))
        return self._queue

    def _abandon_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        workers, self._workers = self._workers, []
        if loop.is_closed():
            return
        for task in workers:
            loop.call_soon_threadsafe(task.cancel)

    def submit(self, records: Iterable[ReviewRecord]) -> int:
        """Enqueue one job per record and return immediately. Needs a running loop.

        Records that already have a job queued or running are skipped.
        """
        queue = self._ensure_started()
        count = 0
        for record in records:
            if record.id in self._pending:
                continue
            job = AnalysisJob(image_id=record.id, name=record.name, locator=record.direct_download_url)
            self._pending[record.id] = job
            queue.put_nowait(job)
            count += 1
        if count:
            logger.info("Queued %d image(s) for analysis (backlog=%d)", count, queue.qsize())
        return count

    @property
    def in_flight(self) -> frozenset[str]:
        """Image ids with a job queued or running."""
        return frozenset(self._pending)

    @property
    def backlog(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    async def join(self) -> None:
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        workers, self._workers = self._workers, []
        for task in workers:
            task.cancel()
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)
        self._queue = None
        self._loop = None
        self._pending.clear()

    async def _worker(self, queue: asyncio.Queue[AnalysisJob]) -> None:
        while True:
            job = await queue.get()
            try:
                await self.run_job(job)
                if self._pending.get(job.image_id) is job:
                    del self._pending[job.image_id]
            finally:
                queue.task_done()

    async def run_job(self, job: AnalysisJob) -> None:
        try:
            judgment = await self.classifier.analyze(job.locator)
        except ClassifierError as exc:
            logger.warning("AI analysis failed for %s: %s", job.name, exc)
            self.session.apply_error(job.image_id, str(exc) or "AI analysis failed")
        except Exception as exc:
            logger.exception("Unexpected analysis failure for %s", job.name)
            self.session.apply_error(job.image_id, str(exc) or "AI analysis failed")
        else:
            self.session.apply_judgment(job.image_id, judgment)
