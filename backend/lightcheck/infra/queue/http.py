from __future__ import annotations

import logging
from typing import Any

import httpx

from lightcheck.domain.errors import QueueError, QueuePayloadError
from lightcheck.domain.models import BatchDescriptor, QueueCommandResult
from lightcheck.infra.ports.queue import QueuePort
from lightcheck.infra.queue.schemas import parse_batch, parse_command

logger = logging.getLogger(__name__)


class HttpQueueClient(QueuePort):
    """Client for the batch-serving endpoint (``GET <url>?action=...``)."""

    provider_name = "http"

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout_seconds = max(3, int(timeout_seconds))
        self._transport = transport

    async def _call(self, action: str) -> Any:
        logger.info("Queue call action=%s", action)
        try:
            # Apps Script web apps answer with a redirect to the content host.
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.timeout_seconds,
                follow_redirects=True,
            ) as client:
                response = await client.get(self.base_url, params={"action": action})
        except httpx.HTTPError as exc:
            raise QueueError(f"Queue connection error ({action}): {exc}") from exc

        if not response.is_success:
            raise QueueError(f"Queue API error ({response.status_code}) on action={action}")

        try:
            return response.json()
        except ValueError as exc:
            raise QueuePayloadError(f"Queue returned non-JSON body on action={action}") from exc

    async def initialize(self) -> QueueCommandResult:
        return parse_command(await self._call("init"))

    async def fetch_next_batch(self) -> BatchDescriptor | None:
        batch = parse_batch(await self._call("next"))
        if batch is None:
            logger.info("Queue reported no more batches")
        else:
            logger.info(
                "Fetched batch %s/%s from folder %s (%d images)",
                batch.batch_index,
                batch.total_batches,
                batch.folder_name,
                len(batch.images),
            )
        return batch

    async def reset(self) -> QueueCommandResult:
        return parse_command(await self._call("reset"))
