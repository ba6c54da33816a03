from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class SessionConfigRequest(BaseModel):
    queueUrl: str = Field(min_length=1)


class StatusMessageItem(BaseModel):
    text: str
    type: Literal["info", "error", "success"]
    createdAt: datetime


class BatchInfo(BaseModel):
    folderName: str
    folderId: str
    batchIndex: int
    totalBatches: int
    caption: str


class SessionSummaryResponse(BaseModel):
    configured: bool
    totalProcessed: int
    pendingInBatch: int
    batchSize: int
    analysisBacklog: int
    batch: BatchInfo | None = None
    caption: str
    status: StatusMessageItem | None = None
