from __future__ import annotations

from abc import ABC, abstractmethod

from lightcheck.domain.models import BatchDescriptor, QueueCommandResult


class QueuePort(ABC):
    @abstractmethod
    async def initialize(self) -> QueueCommandResult:
        """Ask the backend to rebuild its batch queue."""

    @abstractmethod
    async def fetch_next_batch(self) -> BatchDescriptor | None:
        """Return the next batch, or None when the backend has no more images."""

    @abstractmethod
    async def reset(self) -> QueueCommandResult:
        """Rewind the backend queue. Local review history is not affected."""
