from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Literal

ValidationStatus = Literal["pending", "confirmed", "denied"]
StatusType = Literal["info", "error", "success"]
AnalysisState = Literal["analyzing", "error", "done"]


@dataclass(frozen=True)
class ImageRef:
    id: str
    name: str
    preview_url: str
    direct_download_url: str


@dataclass(frozen=True)
class BatchDescriptor:
    folder_name: str
    folder_id: str
    batch_index: int
    total_batches: int
    images: tuple[ImageRef, ...] = ()

    @property
    def caption(self) -> str:
        return f"Current Folder: {self.folder_name} (Batch {self.batch_index} of {self.total_batches})"


@dataclass(frozen=True)
class ClassifierJudgment:
    lights_on: bool
    confidence: float
    explanation: str


@dataclass(frozen=True)
class QueueCommandResult:
    success: bool
    message: str | None = None


@dataclass(frozen=True)
class ReviewRecord:
    """Review state of one image. Instances are replaced, never mutated."""

    id: str
    name: str
    preview_url: str
    direct_download_url: str
    folder_name: str
    judgment: ClassifierJudgment | None = None
    error: str | None = None
    human_override: bool | None = None
    final_status: bool | None = None
    validation_status: ValidationStatus = "pending"

    @classmethod
    def from_image(cls, image: ImageRef, *, folder_name: str) -> ReviewRecord:
        return cls(
            id=image.id,
            name=image.name,
            preview_url=image.preview_url,
            direct_download_url=image.direct_download_url,
            folder_name=folder_name,
        )

    @property
    def analysis_state(self) -> AnalysisState:
        if self.judgment is not None:
            return "done"
        if self.error is not None:
            return "error"
        return "analyzing"

    @property
    def provisional_status(self) -> bool | None:
        # An analyzed but unreviewed image reports the classifier's answer.
        if self.final_status is not None:
            return self.final_status
        if self.judgment is not None:
            return self.judgment.lights_on
        return None

    def with_judgment(self, judgment: ClassifierJudgment) -> ReviewRecord:
        record = replace(self, judgment=judgment, error=None)
        return record._rederive()

    def with_error(self, message: str) -> ReviewRecord:
        return replace(
            self,
            judgment=None,
            error=message,
            human_override=None,
            final_status=None,
            validation_status="pending",
        )

    def confirmed(self) -> ReviewRecord:
        if self.judgment is None:
            return self
        return replace(
            self,
            validation_status="confirmed",
            human_override=None,
            final_status=self.judgment.lights_on,
        )

    def denied(self) -> ReviewRecord:
        if self.judgment is None:
            return self
        overridden = not self.judgment.lights_on
        return replace(
            self,
            validation_status="denied",
            human_override=overridden,
            final_status=overridden,
        )

    def _rederive(self) -> ReviewRecord:
        if self.validation_status == "confirmed":
            return self.confirmed()
        if self.validation_status == "denied":
            return self.denied()
        return self


@dataclass(frozen=True)
class StatusMessage:
    text: str
    type: StatusType = "info"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
