from typing import Literal

from pydantic import BaseModel

ValidationStatus = Literal["pending", "confirmed", "denied"]
AnalysisState = Literal["analyzing", "error", "done"]


class JudgmentItem(BaseModel):
    lightsOn: bool
    confidence: float
    explanation: str


class ReviewRecordItem(BaseModel):
    id: str
    name: str
    folderName: str
    previewUrl: str
    directDownloadUrl: str
    analysisState: AnalysisState
    aiResult: JudgmentItem | None = None
    aiError: str | None = None
    humanOverride: bool | None = None
    finalStatus: bool | None = None
    provisionalStatus: bool | None = None
    validationStatus: ValidationStatus


class RecordListResponse(BaseModel):
    items: list[ReviewRecordItem]
    count: int
    pendingCount: int
