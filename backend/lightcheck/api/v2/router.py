from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse

from lightcheck.api.v2.dependencies import provide_review_service, provide_session
from lightcheck.api.v2.schemas.queue import NextBatchResponse, QueueCommandResponse, QueueResetRequest
from lightcheck.api.v2.schemas.review import JudgmentItem, RecordListResponse, ReviewRecordItem
from lightcheck.api.v2.schemas.session import (
    BatchInfo,
    SessionConfigRequest,
    SessionSummaryResponse,
    StatusMessageItem,
)
from lightcheck.application.services import ReviewWorkflowService
from lightcheck.application.session import ReviewSession
from lightcheck.core.config import get_settings
from lightcheck.domain.errors import (
    ConfigurationError,
    ExportError,
    LightcheckError,
    QueueError,
    RecordNotFoundError,
    ResetNotConfirmedError,
)
from lightcheck.domain.models import BatchDescriptor, ReviewRecord, StatusMessage

router = APIRouter(prefix="/v2", tags=["v2"])

_XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _http_error(exc: LightcheckError) -> HTTPException:
    if isinstance(exc, RecordNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ResetNotConfirmedError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, QueueError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _status_item(status: StatusMessage | None) -> StatusMessageItem | None:
    if status is None:
        return None
    return StatusMessageItem(text=status.text, type=status.type, createdAt=status.created_at)


def _batch_info(batch: BatchDescriptor | None) -> BatchInfo | None:
    if batch is None:
        return None
    return BatchInfo(
        folderName=batch.folder_name,
        folderId=batch.folder_id,
        batchIndex=batch.batch_index,
        totalBatches=batch.total_batches,
        caption=batch.caption,
    )


def _record_item(record: ReviewRecord) -> ReviewRecordItem:
    judgment = record.judgment
    return ReviewRecordItem(
        id=record.id,
        name=record.name,
        folderName=record.folder_name,
        previewUrl=record.preview_url,
        directDownloadUrl=record.direct_download_url,
        analysisState=record.analysis_state,
        aiResult=(
            JudgmentItem(
                lightsOn=judgment.lights_on,
                confidence=judgment.confidence,
                explanation=judgment.explanation,
            )
            if judgment
            else None
        ),
        aiError=record.error,
        humanOverride=record.human_override,
        finalStatus=record.final_status,
        provisionalStatus=record.provisional_status,
        validationStatus=record.validation_status,
    )


def _record_list(records: list[ReviewRecord]) -> RecordListResponse:
    return RecordListResponse(
        items=[_record_item(record) for record in records],
        count=len(records),
        pendingCount=sum(1 for record in records if record.validation_status == "pending"),
    )


@router.get("/session", response_model=SessionSummaryResponse)
async def get_session(
    session: ReviewSession = Depends(provide_session),
    service: ReviewWorkflowService = Depends(provide_review_service),
):
    batch = session.batch
    return SessionSummaryResponse(
        configured=session.is_configured,
        totalProcessed=session.total_processed,
        pendingInBatch=session.pending_in_batch,
        batchSize=len(session.current_batch),
        analysisBacklog=service.analysis.backlog,
        batch=_batch_info(batch),
        caption=batch.caption if batch else "No active batch. Initialize or fetch next.",
        status=_status_item(session.status),
    )


@router.put("/session/config", response_model=SessionSummaryResponse)
async def configure_session(
    body: SessionConfigRequest,
    session: ReviewSession = Depends(provide_session),
    service: ReviewWorkflowService = Depends(provide_review_service),
):
    try:
        service.configure(body.queueUrl)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return await get_session(session=session, service=service)


@router.post("/queue/init", response_model=QueueCommandResponse)
async def init_queue(service: ReviewWorkflowService = Depends(provide_review_service)):
    try:
        result = await service.init_queue()
    except LightcheckError as exc:
        raise _http_error(exc) from exc
    return QueueCommandResponse(
        success=result.success,
        message=result.message,
        status=_status_item(service.session.status),
    )


@router.post("/queue/next", response_model=NextBatchResponse)
async def fetch_next_batch(service: ReviewWorkflowService = Depends(provide_review_service)):
    try:
        batch = await service.fetch_next_batch()
    except LightcheckError as exc:
        raise _http_error(exc) from exc
    return NextBatchResponse(
        hasMore=batch is not None,
        batch=_batch_info(batch),
        images=[_record_item(record) for record in service.session.current_batch],
        status=_status_item(service.session.status),
    )


@router.post("/queue/reset", response_model=QueueCommandResponse)
async def reset_queue(
    body: QueueResetRequest,
    service: ReviewWorkflowService = Depends(provide_review_service),
):
    try:
        result = await service.reset_queue(confirmed=body.confirm)
    except LightcheckError as exc:
        raise _http_error(exc) from exc
    return QueueCommandResponse(
        success=result.success,
        message=result.message,
        status=_status_item(service.session.status),
    )


@router.get("/batch", response_model=RecordListResponse)
async def get_current_batch(session: ReviewSession = Depends(provide_session)):
    return _record_list(session.current_batch)


@router.get("/history", response_model=RecordListResponse)
async def get_history(session: ReviewSession = Depends(provide_session)):
    return _record_list(session.history)


@router.get("/images/{imageId}", response_model=ReviewRecordItem)
async def get_image(imageId: str, session: ReviewSession = Depends(provide_session)):
    try:
        return _record_item(session.get(imageId))
    except RecordNotFoundError as exc:
        raise _http_error(exc) from exc


@router.get("/images/{imageId}/view")
async def view_image(imageId: str, session: ReviewSession = Depends(provide_session)):
    try:
        record = session.get(imageId)
    except RecordNotFoundError as exc:
        raise _http_error(exc) from exc
    return RedirectResponse(url=record.preview_url, status_code=307)


@router.post("/images/{imageId}/confirm", response_model=ReviewRecordItem)
async def confirm_image(imageId: str, service: ReviewWorkflowService = Depends(provide_review_service)):
    try:
        return _record_item(service.confirm(imageId))
    except RecordNotFoundError as exc:
        raise _http_error(exc) from exc


@router.post("/images/{imageId}/deny", response_model=ReviewRecordItem)
async def deny_image(imageId: str, service: ReviewWorkflowService = Depends(provide_review_service)):
    try:
        return _record_item(service.deny(imageId))
    except RecordNotFoundError as exc:
        raise _http_error(exc) from exc


@router.get("/report")
async def export_report(service: ReviewWorkflowService = Depends(provide_review_service)):
    try:
        data = service.export_report()
    except ExportError as exc:
        raise _http_error(exc) from exc
    if data is None:
        return Response(status_code=204)

    filename = get_settings().report_filename
    return Response(
        content=data,
        media_type=_XLSX_MIME,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
