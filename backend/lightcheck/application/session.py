from __future__ import annotations

import time
from collections.abc import Callable, Collection
from dataclasses import replace

from lightcheck.domain.errors import RecordNotFoundError
from lightcheck.domain.models import (
    BatchDescriptor,
    ClassifierJudgment,
    ReviewRecord,
    StatusMessage,
    StatusType,
)


class ReviewSession:
    """All review state of one running process.

    History is the only copy of every record, keyed by image id in fetch
    order. The current batch is an ordered tuple of ids into that mapping,
    so batch and history views always show the same values. Every update
    swaps in a new mapping instead of editing the old one; readers holding a
    previous snapshot never observe a partial change.
    """

    def __init__(
        self,
        *,
        queue_url: str | None = None,
        status_ttl_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.queue_url = queue_url
        self.status_ttl_seconds = status_ttl_seconds
        self._clock = clock
        self._records: dict[str, ReviewRecord] = {}
        self._batch_ids: tuple[str, ...] = ()
        self.batch: BatchDescriptor | None = None
        self._status: StatusMessage | None = None
        self._status_expires_at = 0.0

    @property
    def is_configured(self) -> bool:
        return bool(self.queue_url)

    @property
    def history(self) -> list[ReviewRecord]:
        return list(self._records.values())

    @property
    def current_batch(self) -> list[ReviewRecord]:
        records = self._records
        return [records[image_id] for image_id in self._batch_ids if image_id in records]

    @property
    def total_processed(self) -> int:
        return len(self._records)

    @property
    def pending_in_batch(self) -> int:
        return sum(1 for record in self.current_batch if record.validation_status == "pending")

    def get(self, image_id: str) -> ReviewRecord:
        record = self._records.get(image_id)
        if record is None:
            raise RecordNotFoundError(image_id)
        return record

    def _store(self, record: ReviewRecord) -> ReviewRecord:
        records = dict(self._records)
        records[record.id] = record
        self._records = records
        return record

    def open_batch(
        self, batch: BatchDescriptor, *, in_flight: Collection[str] = ()
    ) -> list[ReviewRecord]:
        """Make ``batch`` current and return the records that still need analysis.

        New images are appended to history right away. An image id already in
        history keeps its record; it is analyzed again only if it has no
        judgment and no job in ``in_flight``.
        """
        records = dict(self._records)
        to_analyze: list[ReviewRecord] = []
        batch_ids: list[str] = []
        for image in batch.images:
            if image.id in batch_ids:
                continue
            batch_ids.append(image.id)
            existing = records.get(image.id)
            if existing is None:
                record = ReviewRecord.from_image(image, folder_name=batch.folder_name)
                records[image.id] = record
                to_analyze.append(record)
            elif existing.judgment is None and image.id not in in_flight:
                record = replace(existing, error=None)
                records[image.id] = record
                to_analyze.append(record)

        self._records = records
        self._batch_ids = tuple(batch_ids)
        self.batch = batch
        return to_analyze

    def clear_batch(self) -> None:
        self._batch_ids = ()
        self.batch = None

    def apply_judgment(self, image_id: str, judgment: ClassifierJudgment) -> ReviewRecord | None:
        record = self._records.get(image_id)
        if record is None:
            return None
        # A judgment is set once; later results for the same id are dropped.
        if record.judgment is not None:
            return record
        return self._store(record.with_judgment(judgment))

    def apply_error(self, image_id: str, message: str) -> ReviewRecord | None:
        record = self._records.get(image_id)
        if record is None:
            return None
        if record.judgment is not None:
            return record
        return self._store(record.with_error(message))

    def confirm(self, image_id: str) -> ReviewRecord:
        record = self.get(image_id)
        if record.judgment is None:
            return record
        return self._store(record.confirmed())

    def deny(self, image_id: str) -> ReviewRecord:
        record = self.get(image_id)
        if record.judgment is None:
            return record
        return self._store(record.denied())

    def post_status(self, text: str, type: StatusType = "info") -> StatusMessage:
        self._status = StatusMessage(text=text, type=type)
        self._status_expires_at = self._clock() + self.status_ttl_seconds
        return self._status

    @property
    def status(self) -> StatusMessage | None:
        if self._status is not None and self._clock() >= self._status_expires_at:
            self._status = None
        return self._status
