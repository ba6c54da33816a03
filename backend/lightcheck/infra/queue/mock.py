from __future__ import annotations

from lightcheck.domain.models import BatchDescriptor, ImageRef, QueueCommandResult
from lightcheck.infra.ports.queue import QueuePort


def _default_folders() -> dict[str, list[str]]:
    return {
        "shelter_north": [f"north_{idx:02d}.jpg" for idx in range(1, 6)],
        "shelter_south": [f"south_{idx:02d}.jpg" for idx in range(1, 4)],
    }


class MockQueueClient(QueuePort):
    """In-memory queue that serves fixed folders in batches."""

    provider_name = "mock"

    def __init__(self, *, folders: dict[str, list[str]] | None = None, batch_size: int = 4):
        self.folders = folders if folders is not None else _default_folders()
        self.batch_size = max(1, int(batch_size))
        self._batches: list[BatchDescriptor] = []
        self._cursor = 0
        self.calls: list[str] = []
        self._build()

    def _build(self) -> None:
        batches: list[BatchDescriptor] = []
        for folder_name, names in self.folders.items():
            folder_id = f"fld_{folder_name}"
            chunks = [names[i : i + self.batch_size] for i in range(0, len(names), self.batch_size)]
            for idx, chunk in enumerate(chunks, start=1):
                images = tuple(
                    ImageRef(
                        id=f"{folder_id}_{name}",
                        name=name,
                        preview_url=f"https://mock.local/preview/{folder_name}/{name}",
                        direct_download_url=f"https://mock.local/download/{folder_name}/{name}",
                    )
                    for name in chunk
                )
                batches.append(
                    BatchDescriptor(
                        folder_name=folder_name,
                        folder_id=folder_id,
                        batch_index=idx,
                        total_batches=len(chunks),
                        images=images,
                    )
                )
        self._batches = batches
        self._cursor = 0

    async def initialize(self) -> QueueCommandResult:
        self.calls.append("init")
        self._build()
        return QueueCommandResult(success=True, message=f"{len(self._batches)} batches queued")

    async def fetch_next_batch(self) -> BatchDescriptor | None:
        self.calls.append("next")
        if self._cursor >= len(self._batches):
            return None
        batch = self._batches[self._cursor]
        self._cursor += 1
        return batch

    async def reset(self) -> QueueCommandResult:
        self.calls.append("reset")
        self._cursor = 0
        return QueueCommandResult(success=True, message="Queue reset")
