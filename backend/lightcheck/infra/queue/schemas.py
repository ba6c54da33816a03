"""Pydantic models for queue backend payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lightcheck.domain.errors import QueuePayloadError
from lightcheck.domain.models import BatchDescriptor, ImageRef, QueueCommandResult


class ImagePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    name: str
    previewUrl: str
    directDownloadUrl: str


class BatchPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    folderName: str
    folderId: str
    batchIndex: int
    totalBatches: int
    images: list[ImagePayload]


class CommandPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    message: str | None = None


def parse_batch(data: Any) -> BatchDescriptor | None:
    """Return the batch described by ``data``; None when it carries no images."""
    if data is None:
        return None
    if not isinstance(data, dict):
        raise QueuePayloadError("Queue returned a non-object batch payload")

    images = data.get("images")
    if not images:
        return None

    try:
        payload = BatchPayload.model_validate(data)
    except ValidationError as exc:
        raise QueuePayloadError(f"Malformed batch payload: {exc}") from exc

    return BatchDescriptor(
        folder_name=payload.folderName,
        folder_id=payload.folderId,
        batch_index=payload.batchIndex,
        total_batches=payload.totalBatches,
        images=tuple(
            ImageRef(
                id=item.id,
                name=item.name,
                preview_url=item.previewUrl,
                direct_download_url=item.directDownloadUrl,
            )
            for item in payload.images
        ),
    )


def parse_command(data: Any) -> QueueCommandResult:
    try:
        payload = CommandPayload.model_validate(data)
    except ValidationError as exc:
        raise QueuePayloadError(f"Malformed command payload: {exc}") from exc
    return QueueCommandResult(success=payload.success, message=payload.message)
