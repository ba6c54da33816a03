from pydantic import BaseModel

from lightcheck.api.v2.schemas.review import ReviewRecordItem
from lightcheck.api.v2.schemas.session import BatchInfo, StatusMessageItem


class QueueCommandResponse(BaseModel):
    success: bool
    message: str | None = None
    status: StatusMessageItem | None = None


class QueueResetRequest(BaseModel):
    confirm: bool = False


class NextBatchResponse(BaseModel):
    hasMore: bool
    batch: BatchInfo | None = None
    images: list[ReviewRecordItem]
    status: StatusMessageItem | None = None
